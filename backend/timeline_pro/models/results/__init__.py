"""Result models for service operations."""

from timeline_pro.models.results.gemini import GeminiResult, GenerateContentResult

__all__ = ["GeminiResult", "GenerateContentResult"]
