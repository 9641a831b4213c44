from typing import List
from pydantic import BaseModel, Field


class TextTranslateRequest(BaseModel):
    text: List[str] = Field(default_factory=list)
    source_lang: str = ""  # Empty lets DeepL detect the language
    target_lang: str = ""


class TextTranslateResponse(BaseModel):
    translation: List[str]
