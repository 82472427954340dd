"""User-facing error messages (English / Spanish)."""

from typing import Dict, Optional

ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "UNKNOWN_ERROR": "An unknown error occurred.",
        "EMPTY_INPUT": "Please add at least one ingredient to generate a cocktail.",
        "VALIDATION_ERROR": "The request is not valid.",
        "OFFLINE": "You appear to be offline. Please check your internet connection.",
        "API_KEY_INVALID": "The application is not configured correctly. Please contact the administrator.",
        "QUOTA_EXCEEDED": "Image generation quota exceeded. Please check your plan and billing details.",
        "GENERATION_FAILED": "Failed to generate cocktails. The mixologist might be on a break. Please check your ingredients and try again.",
        "IMAGE_GENERATION_FAILED": "Failed to create an image for the cocktail. Please try again.",
        "IDENTIFICATION_FAILED": "Failed to identify ingredients from the image. Please try another photo.",
        "NOT_FOUND": "The shared cocktail could not be found or has expired.",
        "IMAGE_PROCESSING_ERROR": "The uploaded image could not be processed. Please try another photo.",
        "SHARE_STORE_ERROR": "The cocktail could not be saved for sharing. Please try again later.",
        "STATUS_TRANSITION_ERROR": "The cocktail image status could not be updated. Please try again.",
        "GEMINI_ERROR": "The AI service returned an unexpected response. Please try again.",
    },
    "es": {
        "UNKNOWN_ERROR": "Ocurrió un error desconocido.",
        "EMPTY_INPUT": "Por favor, añade al menos un ingrediente para generar un cóctel.",
        "VALIDATION_ERROR": "La solicitud no es válida.",
        "OFFLINE": "Parece que no tienes conexión. Por favor, revisa tu conexión a internet.",
        "API_KEY_INVALID": "La aplicación no está configurada correctamente. Por favor, contacta al administrador.",
        "QUOTA_EXCEEDED": "Se ha excedido la cuota de generación de imágenes. Revisa tu plan y detalles de facturación.",
        "GENERATION_FAILED": "No se pudieron generar los cócteles. El mixólogo podría estar en un descanso. Revisa tus ingredientes e inténtalo de nuevo.",
        "IMAGE_GENERATION_FAILED": "No se pudo crear una imagen para el cóctel. Por favor, inténtalo de nuevo.",
        "IDENTIFICATION_FAILED": "No se pudieron identificar los ingredientes de la imagen. Por favor, intenta con otra foto.",
        "NOT_FOUND": "El cóctel compartido no se pudo encontrar o ha expirado.",
        "IMAGE_PROCESSING_ERROR": "No se pudo procesar la imagen. Por favor, intenta con otra foto.",
        "SHARE_STORE_ERROR": "No se pudo guardar el cóctel para compartirlo. Por favor, inténtalo más tarde.",
        "STATUS_TRANSITION_ERROR": "No se pudo actualizar el estado de la imagen del cóctel. Por favor, inténtalo de nuevo.",
        "GEMINI_ERROR": "El servicio de IA devolvió una respuesta inesperada. Por favor, inténtalo de nuevo.",
    },
}

DEFAULT_LANGUAGE = "es"


def pick_language(accept_language: Optional[str]) -> str:
    """First supported language in an Accept-Language header, else the default."""
    for part in (accept_language or "").split(","):
        code = part.split(";")[0].strip().lower()[:2]
        if code in ERROR_MESSAGES:
            return code
    return DEFAULT_LANGUAGE


def localized_message(code: str, language: str) -> str:
    messages = ERROR_MESSAGES.get(language, ERROR_MESSAGES[DEFAULT_LANGUAGE])
    return messages.get(code, messages["UNKNOWN_ERROR"])
