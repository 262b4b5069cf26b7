import os
from dotenv import load_dotenv
from typing import Any, Dict, List

from google.generativeai.types import HarmBlockThreshold, HarmCategory

# Carrega variáveis de ambiente de um arquivo .env
load_dotenv()

# --- Configuração da IA ---
API_KEY_PREFIX = 'GEMINI_API_KEY'


def _load_ai_keys() -> List[str]:
    """
    Reads every GEMINI_API_KEY* variable from the environment and returns them
    as a single ordered list.
    """
    keys = {}
    for key, value in os.environ.items():
        if value and key.startswith(API_KEY_PREFIX):
            keys[key] = value

    # Sort by variable name for predictable order (GEMINI_API_KEY, GEMINI_API_KEY_2, ...)
    sorted_key_names = sorted(keys.keys())

    return [keys[k] for k in sorted_key_names]


AI_API_KEYS = _load_ai_keys()

AI_MODEL = os.getenv('AI_MODEL', 'gemini-1.5-flash')

AI_GENERATION_CONFIG: Dict[str, Any] = {
    'temperature': 0.8,
    'max_output_tokens': 1000,
}

# The Mentor persona is blunt on purpose; default thresholds silence it.
SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_NONE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_NONE,
}

RETRY_DELAY_SECONDS = float(os.getenv('RETRY_DELAY_SECONDS', 0.8))

# Optional file whose contents replace the built-in system instruction
SYSTEM_INSTRUCTION_PATH = os.getenv('SYSTEM_INSTRUCTION_PATH')

# --- Logging ---
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_DIR = os.getenv('LOG_DIR', 'logs')
