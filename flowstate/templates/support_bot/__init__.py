"""
Support Bot Agent - retrieval-augmented answers for the SuperCloud API.
"""

from .agent import SupportBotAgent, build_graph, channels, default_agent
from .config import DEFAULT_DOCS, AgentMetadata, default_config, metadata
from .knowledge_base import KnowledgeBase

__version__ = "1.0.0"

__all__ = [
    "SupportBotAgent",
    "KnowledgeBase",
    "build_graph",
    "channels",
    "default_agent",
    "DEFAULT_DOCS",
    "AgentMetadata",
    "default_config",
    "metadata",
]
