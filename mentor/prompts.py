"""
Fixed prompt text and user-facing messages for the Mentor.
"""
import logging
from pathlib import Path
from typing import Optional

from .config import SYSTEM_INSTRUCTION_PATH

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_INSTRUCTION = """
Você é o MENTOR: um estrategista direto, exigente e sem rodeios.

- Responda sempre em português.
- Vá direto ao ponto. Nada de teoria vazia, apenas ações concretas.
- Confronte desculpas e autoengano com firmeza, mas sem humilhar.
- Quando receber uma imagem, analise o que ela mostra antes de aconselhar.
- Termine cada resposta com um próximo passo claro e executável hoje.
""".strip()

MIND_MAP_TEMPLATE = """
ATUE COMO UM ESTRATEGISTA DE ELITE.
Crie um Mapa Mental hierárquico (formato de texto identado) para resolver esta confusão: "{topic}".

REGRAS:
1. Use apenas texto puro.
2. Use hierarquia com marcadores (-, *, +).
3. Seja brutalmente prático. Nada de teoria. Apenas ações.

Retorne APENAS o mapa.
""".strip()

SAFETY_BLOCKED_MESSAGE = (
    "O Mentor foi silenciado pelos protocolos de segurança. "
    "Tente reformular sua frase de forma menos 'extrema'."
)

CRITICAL_ERROR_MESSAGE = (
    "ERRO CRÍTICO: Sistema sobrecarregado ou bloqueado. "
    "Tente novamente em 1 minuto."
)

INVALID_ATTACHMENT_MESSAGE = (
    "Não consegui ler a imagem enviada. "
    "Envie o arquivo novamente em um formato de imagem válido."
)


def load_system_instruction(path: Optional[str] = SYSTEM_INSTRUCTION_PATH) -> str:
    """Returns the system instruction, read from `path` when one is configured."""
    if not path:
        return DEFAULT_SYSTEM_INSTRUCTION

    try:
        text = Path(path).read_text(encoding='utf-8').strip()
    except OSError as e:
        logger.error(f"Could not read system instruction from '{path}': {e}. Using the built-in one.")
        return DEFAULT_SYSTEM_INSTRUCTION

    if not text:
        logger.warning(f"System instruction file '{path}' is empty. Using the built-in one.")
        return DEFAULT_SYSTEM_INSTRUCTION
    return text


def build_mind_map_prompt(topic: str) -> str:
    return MIND_MAP_TEMPLATE.format(topic=topic)
