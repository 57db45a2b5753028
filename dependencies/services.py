"""
Request-scoped accessors for the objects built once in create_app().
"""
from typing import Optional

from fastapi import Depends, Request
from openai import AsyncOpenAI

from core.config import Settings
from rag_services.llm import LLMService
from services.config_store import ConfigStore
from services.vector_store import VectorStoreService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def build_openai_client(settings: Settings) -> Optional[AsyncOpenAI]:
    """None when no key is configured; the services report that per call."""
    if not settings.openai_api_key:
        return None
    # No retries: a failed provider call is final for that request.
    return AsyncOpenAI(api_key=settings.openai_api_key, max_retries=0)


def get_openai_client(request: Request) -> Optional[AsyncOpenAI]:
    state = request.app.state
    if state.openai_client is None:
        state.openai_client = build_openai_client(state.settings)
    return state.openai_client


def get_config_store(settings: Settings = Depends(get_settings)) -> ConfigStore:
    return ConfigStore(settings.config_path, env_override=settings.vector_store_id)


def get_llm_service(
    settings: Settings = Depends(get_settings),
    client: Optional[AsyncOpenAI] = Depends(get_openai_client),
) -> LLMService:
    return LLMService(client, model=settings.chat_model)


def get_vector_store_service(client: Optional[AsyncOpenAI] = Depends(get_openai_client)) -> VectorStoreService:
    return VectorStoreService(client)
