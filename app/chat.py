import html
import logging
from typing import Any, Optional, Sequence, Union

from fastapi import HTTPException

from app.config import Settings
from app.services.gemini import GeminiClient

logger = logging.getLogger(__name__)

INVALID_QUESTION_MESSAGE = "Pergunta é obrigatória e deve ser texto."
MISSING_CONFIG_MESSAGE = "Configuração do servidor incompleta."
SERVER_ERROR_MESSAGE = "❌ Ocorreu um erro no servidor!!"
PLACEHOLDER_ANSWER = "No answer"

LOG_PREVIEW_LENGTH = 100

# candidates[0].content.parts[0].text
ANSWER_PATH = ("candidates", 0, "content", "parts", 0, "text")

# Caracteres extra que html.escape no cubre
_LOG_ESCAPES = str.maketrans({"/": "&#x2F;", "\\": "&#x5C;", "`": "&#96;"})


def upstream_error_message(status: int) -> str:
    return f"⚠️ Erro ao obter resposta do Gemini. Status: {status}"


def sanitize_for_log(question: str) -> str:
    """Copia truncada y escapada de la pregunta, solo para los logs."""
    return html.escape(question[:LOG_PREVIEW_LENGTH], quote=True).translate(_LOG_ESCAPES)


def get_path(data: Any, path: Sequence[Union[str, int]]) -> Optional[Any]:
    """
    Recorre data siguiendo path (claves de dict o índices de lista).
    Devuelve None si algún segmento no existe o tiene otro tipo.
    """
    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        else:
            if not isinstance(current, dict) or key not in current:
                return None
            current = current[key]
    return current


def extract_answer(payload: Any) -> str:
    text = get_path(payload, ANSWER_PATH)
    if isinstance(text, str) and text:
        return text
    return PLACEHOLDER_ANSWER


class ChatHandler:
    """
    Valida la pregunta, la reenvía a Gemini y normaliza el resultado.
    No guarda estado entre requests.
    """

    def __init__(self, settings: Settings, client: Optional[GeminiClient] = None):
        self.settings = settings
        self.client = client or GeminiClient()

    async def ask(self, question: Any) -> str:
        if not question or not isinstance(question, str):
            raise HTTPException(status_code=400, detail=INVALID_QUESTION_MESSAGE)

        sanitized_question = sanitize_for_log(question)

        try:
            if not self.settings.is_configured:
                logger.error("Configuración del servidor incompleta: falta GEMINI_API_KEY o GEMINI_API_URL")
                raise HTTPException(status_code=500, detail=MISSING_CONFIG_MESSAGE)

            logger.info(f"Procesando pregunta: {sanitized_question}...")

            response = await self.client.generate_content(
                self.settings.gemini_api_url,
                self.settings.gemini_api_key,
                question,
            )

            if not response.ok:
                logger.error(f"Error de la API Gemini: {response.status}")
                raise HTTPException(
                    status_code=response.status,
                    detail=upstream_error_message(response.status),
                )

            return extract_answer(response.json())

        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error en el servidor: {str(e)}")
            raise HTTPException(status_code=500, detail=SERVER_ERROR_MESSAGE)
