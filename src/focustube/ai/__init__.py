"""AI module for remote-model relevance classification."""

from focustube.ai.cache import DecisionCache, LRUPolicy, TaskScopedPolicy, UnboundedPolicy
from focustube.ai.claude_client import ClaudeClient
from focustube.ai.gemini_client import GeminiClient, RemoteClassifierError
from focustube.ai.llm_classifier import LLMClassifier, create_llm_classifier

__all__ = [
    "DecisionCache",
    "LRUPolicy",
    "TaskScopedPolicy",
    "UnboundedPolicy",
    "ClaudeClient",
    "GeminiClient",
    "RemoteClassifierError",
    "LLMClassifier",
    "create_llm_classifier",
]
