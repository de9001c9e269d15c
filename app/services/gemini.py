"""
Cliente para la API generativa de Gemini (generateContent)
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict

import aiohttp

logger = logging.getLogger(__name__)


@dataclass
class UpstreamResponse:
    """Respuesta cruda de la API: status HTTP y cuerpo sin interpretar"""
    status: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        return json.loads(self.body)


class GeminiClient:
    def get_headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def build_payload(self, question: str) -> Dict[str, Any]:
        return {
            "contents": [
                {
                    "parts": [
                        {"text": question}
                    ]
                }
            ]
        }

    async def generate_content(self, api_url: str, api_key: str, question: str) -> UpstreamResponse:
        """
        Envía la pregunta a la API de Gemini en un único POST

        Args:
            api_url (str): Endpoint generateContent (HTTPS)
            api_key (str): Llave de la API, va como parámetro ?key=
            question (str): Texto del usuario, sin escapar

        Returns:
            UpstreamResponse: status y cuerpo tal como los devolvió la API
        """
        async with aiohttp.ClientSession() as session:
            async with session.post(
                api_url,
                params={"key": api_key},
                json=self.build_payload(question),
                headers=self.get_headers(),
            ) as response:
                body = await response.text()
                logger.debug(f"Respuesta de Gemini: {response.status}")
                return UpstreamResponse(status=response.status, body=body)
