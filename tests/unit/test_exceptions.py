from ecsmapper.exceptions import (
    AsyncExecutionError,
    BackendError,
    DependencyError,
    EndpointNotImplementedError,
    ExportError,
    InputParseError,
    MappingValidationError,
    PackageError,
    PayloadShapeError,
    SettingsError,
)


def test_root_exception_hierarchy() -> None:
    for error_type in (
        SettingsError,
        AsyncExecutionError,
        DependencyError,
        InputParseError,
        PayloadShapeError,
        BackendError,
        MappingValidationError,
        ExportError,
    ):
        assert issubclass(error_type, PackageError)
    assert issubclass(EndpointNotImplementedError, BackendError)


def test_backend_error_message_and_detail() -> None:
    error = BackendError(message="POST /map-batch failed with status 502", status_code=502, detail="LLM down")

    assert str(error) == "POST /map-batch failed with status 502: LLM down"
    assert error.user_message("fallback") == "LLM down"
    assert BackendError(message="timed out").user_message("fallback") == "fallback"


def test_input_errors_carry_user_messages() -> None:
    assert str(InputParseError()) == "Invalid JSON. Please paste a valid JSON object or array."
    assert str(PayloadShapeError()) == "JSON must be an object or an array of objects."


def test_dependency_error_lists_packages() -> None:
    error = DependencyError(missing_package=["httpx", "rich"], message="cli")
    assert str(error) == "Missing runtime dependencies for 'cli': httpx, rich"
