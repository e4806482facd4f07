# perchfinder/services/openai_service.py
import json
import logging
from typing import Dict, Any, Optional

from flask import Flask
from openai import OpenAI, OpenAIError

from perchfinder.core.errors import UpstreamFailure

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "Du är en erfaren fiskeguide för abborrfiske. "
    "Du använder ENDAST datan du får och hittar inte på saknad information."
)

USER_PROMPT_TEMPLATE = """
Analysera detta vatten och skriv en rekommendation på svenska.

Krav på svar:
1) Svara med exakt två rubriker:
   - Generellt i vattnet
   - När vädret liknar nu
2) Under varje rubrik: 2-4 korta punkter.
3) Väg in flera parametrar samtidigt (betestyp, konkret bete, metod, tid på dygnet, väder, temperatur, lufttryck).
4) Om data för betestyper och metoder för jigg finns, lyft fram dem konkret.
5) Om underlag saknas för del 2, skriv det tydligt utan att gissa.
6) Kort, tydligt och praktiskt (max cirka 170 ord totalt).

Data:
{data}
"""


def build_advice_prompt(payload: Dict[str, Any]) -> str:
    """Deterministic user prompt embedding the validated statistics as pretty-printed JSON."""
    prompt_data = {
        'waterName': payload.get('waterName'),
        'totalCatches': payload.get('totalCatches'),
        'general': payload.get('general'),
        'currentConditions': payload.get('currentConditions'),
        'similarWhenLikeNow': payload.get('similarWhenLikeNow'),
    }
    return USER_PROMPT_TEMPLATE.format(data=json.dumps(prompt_data, indent=2, ensure_ascii=False))


class OpenAIService:
    """
    OpenAI integration: turns a validated statistics payload into fishing advice.
    The client is created in init_app.
    """

    def __init__(self):
        self.client: Optional[OpenAI] = None
        self.model = 'gpt-4.1-mini'
        self.temperature = 0.5

    def init_app(self, app: Flask):
        """
        Configure the OpenAI client from the Flask config.

        :param app: Flask application
        """
        api_key = app.config.get('OPENAI_API_KEY')
        if not api_key:
            raise ValueError("OPENAI_API_KEY must be set in the environment/.env file.")

        self.client = OpenAI(api_key=api_key)
        self.model = app.config.get('OPENAI_MODEL', self.model)
        self.temperature = app.config.get('OPENAI_TEMPERATURE', self.temperature)
        logger.info(f"OpenAIService initialised (model: {self.model})")

    def generate_water_advice(self, payload: Dict[str, Any]) -> str:
        """
        Ask the language model for advice on a water.

        :param payload: validated WaterStatsPayload (camelCase dict)
        :return: the model's text, verbatim
        :raises UpstreamFailure: the model call failed
        """
        if not self.client:
            raise RuntimeError("OpenAIService is not initialised; call init_app first.")

        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_advice_prompt(payload)},
                ],
            )
        except OpenAIError as e:
            logger.error(f"OpenAI advice generation failed: {e}", exc_info=True)
            raise UpstreamFailure(str(e))

        choice = completion.choices[0] if completion.choices else None
        return (choice.message.content if choice else None) or ""
