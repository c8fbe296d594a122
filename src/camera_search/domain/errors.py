"""Error taxonomy for camera search sessions."""

from enum import StrEnum


class SessionErrorKind(StrEnum):
    """Kinds of failure a session can surface."""

    PERMISSION_DENIED = "permission_denied"
    NO_DEVICE = "no_device"
    STREAM_ACQUISITION_FAILED = "stream_acquisition_failed"
    MODEL_LOAD_FAILED = "model_load_failed"
    NO_RECOGNIZABLE_OBJECT = "no_recognizable_object"
    CLASSIFICATION_FAILED = "classification_failed"
    SEARCH_FAILED = "search_failed"


ERROR_MESSAGES: dict[SessionErrorKind, str] = {
    SessionErrorKind.PERMISSION_DENIED: (
        "Acces a la camera refuse. Autorisez l'acces dans les parametres."
    ),
    SessionErrorKind.NO_DEVICE: "Aucune camera detectee sur cet appareil.",
    SessionErrorKind.STREAM_ACQUISITION_FAILED: (
        "Impossible d'acceder a la camera. Verifiez vos permissions."
    ),
    SessionErrorKind.MODEL_LOAD_FAILED: (
        "Impossible de charger le modele. Verifiez votre connexion."
    ),
    SessionErrorKind.NO_RECOGNIZABLE_OBJECT: (
        "Objet non reconnu. Essayez un autre angle ou meilleur eclairage."
    ),
    SessionErrorKind.CLASSIFICATION_FAILED: (
        "Erreur lors de l'analyse de l'image. Reessayez."
    ),
    SessionErrorKind.SEARCH_FAILED: "La recherche a echoue.",
}


def message_for(kind: SessionErrorKind) -> str:
    """Return the user-facing message for an error kind."""
    return ERROR_MESSAGES[kind]


class CameraSearchError(Exception):
    """Base error for the camera search pipeline."""

    kind: SessionErrorKind = SessionErrorKind.CLASSIFICATION_FAILED

    @property
    def user_message(self) -> str:
        return message_for(self.kind)


class CameraError(CameraSearchError):
    """Camera stream could not be acquired."""

    kind = SessionErrorKind.STREAM_ACQUISITION_FAILED


class CameraPermissionDenied(CameraError):
    kind = SessionErrorKind.PERMISSION_DENIED


class CameraNotFound(CameraError):
    kind = SessionErrorKind.NO_DEVICE


class CameraAcquisitionFailed(CameraError):
    kind = SessionErrorKind.STREAM_ACQUISITION_FAILED


class ModelLoadError(CameraSearchError):
    """The classifier runtime or weights failed to load."""

    kind = SessionErrorKind.MODEL_LOAD_FAILED


class ClassificationError(CameraSearchError):
    """The inference call itself failed."""

    kind = SessionErrorKind.CLASSIFICATION_FAILED
