from pdfreshape.exceptions import (
    AsyncExecutionError,
    DependencyError,
    EncodingError,
    InvalidRangeError,
    MalformedDocumentError,
    MissingCollaboratorError,
    NoOutlineError,
    PackageError,
    RenderFailureError,
    SerializationError,
    SettingsError,
)


def test_root_exception_hierarchy() -> None:
    for error_type in (
        SettingsError,
        AsyncExecutionError,
        DependencyError,
        MalformedDocumentError,
        RenderFailureError,
        NoOutlineError,
        InvalidRangeError,
        SerializationError,
        EncodingError,
        MissingCollaboratorError,
    ):
        assert issubclass(error_type, PackageError)


def test_error_messages() -> None:
    assert str(NoOutlineError()) == "This document does not contain bookmarks/outline"
    assert str(RenderFailureError(page_index=4)) == "Failed to render page (page index 4)"
    assert str(DependencyError(missing_package=["pymupdf"], message="crop")) == (
        "Missing runtime dependencies for 'crop': pymupdf"
    )
    assert str(SettingsError(exc=ValueError("bad"))) == "Failed to load settings: bad"
    assert str(MissingCollaboratorError(message="no encoder")) == "no encoder"
