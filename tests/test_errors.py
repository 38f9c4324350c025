import pytest

from rpcproxy.errors import (
    DeserializeError,
    ProjectDataError,
    ProjectStorageError,
    RegistryConfigError,
    SerializeError,
    SetExpiryError,
    StorageConnectionError,
    StorageError,
    StorageOtherError,
)


def test_storage_error_messages():
    assert str(SetExpiryError()) == "couldn't set the expiry to the key"
    assert str(SerializeError()) == "error on serialize data"
    assert str(DeserializeError()) == "error on deserialize data"


def test_connection_error_keeps_detail():
    err = StorageConnectionError("refused")
    assert str(err) == "error on open connection"
    assert err.detail == "refused"


def test_other_error_quotes_detail():
    err = StorageOtherError("boom")
    assert str(err) == '"boom"'
    assert err.detail == "boom"


def test_other_error_escapes_quotes():
    err = StorageOtherError('say "hi"')
    assert str(err) == '"say \\"hi\\""'


def test_project_storage_error_from_registry():
    cause = RegistryConfigError("bad config")
    err = ProjectStorageError(cause)
    assert str(err) == "registry error: bad config"
    assert err.cause is cause


def test_project_storage_error_from_cache():
    err = ProjectStorageError(DeserializeError())
    assert str(err) == "cache error: error on deserialize data"


def test_project_storage_error_rejects_other_causes():
    with pytest.raises(TypeError):
        ProjectStorageError(ValueError("nope"))


def test_storage_errors_share_base_with_distinct_messages():
    errors = [
        SetExpiryError(),
        SerializeError(),
        DeserializeError(),
        StorageConnectionError("refused"),
        StorageOtherError("boom"),
    ]
    assert all(isinstance(err, StorageError) for err in errors)
    messages = [str(err) for err in errors]
    assert len(set(messages)) == len(messages)


def test_project_data_error_messages():
    assert ProjectDataError.NOT_FOUND.message() == "Project not found in registry"
    assert str(ProjectDataError.REGISTRY_CONFIG_ERROR) == "Registry configuration error"


def test_project_data_error_lookup_by_value():
    assert ProjectDataError("NotFound") is ProjectDataError.NOT_FOUND
    assert ProjectDataError("RegistryConfigError") is ProjectDataError.REGISTRY_CONFIG_ERROR