"""
Result models for Gemini service operations.
"""

from pydantic import BaseModel
from typing import Optional


class GeminiResult(BaseModel):
    """Base result for Gemini operations."""
    success: bool


class GenerateContentResult(GeminiResult):
    """Result of a generateContent call."""
    text: Optional[str] = None
    error: Optional[str] = None
    model_name: Optional[str] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    attempts: int = 0
