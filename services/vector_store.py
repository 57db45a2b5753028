"""
Vector store management through the OpenAI API: create the store, upload
files into it, list its contents and check that the credential works.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import openai
from openai import AsyncOpenAI

from core.errors import MissingCredentials, best_effort_message, describe_provider_error
from core.log import get_logger
from services.config_store import is_valid_vector_store_id

logger = get_logger("vector_store")

FILE_PURPOSE = "assistants"


@dataclass
class UploadReport:
    lines: List[str] = field(default_factory=list)
    batch_id: Optional[str] = None
    batch_status: Optional[str] = None
    counts: Dict[str, int] = field(default_factory=dict)

    def as_text(self) -> str:
        out = ["Uploaded:"] + self.lines
        if self.batch_id:
            counts = ", ".join(f"{k}={v}" for k, v in self.counts.items())
            out.append(f"Batch {self.batch_id}: {self.batch_status} ({counts})")
        return "\n".join(out)


class VectorStoreService:
    def __init__(self, client: Optional[AsyncOpenAI]):
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            raise MissingCredentials()
        return self._client

    async def create_store(self, name: str) -> str:
        created = await self.client.vector_stores.create(name=name)
        logger.info("Vector store created: %s (%s)", created.id, name)
        return created.id

    async def upload_files(self, vector_store_id: str, staged: List[Tuple[str, Path]]) -> UploadReport:
        """
        Upload each staged file, then attach all of them with one batch call
        and wait for processing. A failed file upload is reported and skipped.
        If the batch call itself fails, the files uploaded for it are deleted.
        """
        client = self.client
        report = UploadReport()
        names_by_id: Dict[str, str] = {}

        for name, path in staged:
            try:
                with open(path, "rb") as fh:
                    uploaded = await client.files.create(file=(name, fh), purpose=FILE_PURPOSE)
            except (openai.APIError, OSError) as e:
                err = describe_provider_error(e, best_effort_message(e))
                logger.error("File upload failed for %s: %s", name, err.log_detail)
                report.lines.append(f"{name} -> upload failed: {err.public_message}")
                continue
            names_by_id[uploaded.id] = name

        if not names_by_id:
            report.lines.append("Nothing was attached to the vector store.")
            return report

        try:
            batch = await client.vector_stores.file_batches.create_and_poll(
                vector_store_id=vector_store_id,
                file_ids=list(names_by_id),
            )
        except openai.APIError:
            await self._discard_uploads(names_by_id)
            raise
        report.batch_id = batch.id
        report.batch_status = batch.status
        report.counts = {
            "completed": batch.file_counts.completed,
            "failed": batch.file_counts.failed,
            "in_progress": batch.file_counts.in_progress,
            "cancelled": batch.file_counts.cancelled,
            "total": batch.file_counts.total,
        }

        failed: Dict[str, str] = {}
        if batch.file_counts.failed:
            async for item in client.vector_stores.file_batches.list_files(
                batch.id, vector_store_id=vector_store_id, filter="failed"
            ):
                error = item.last_error.message if item.last_error else "unknown error"
                failed[item.id] = error

        for file_id, name in names_by_id.items():
            if file_id in failed:
                report.lines.append(f"{name} -> failed ({file_id}): {failed[file_id]}")
            else:
                report.lines.append(f"{name} -> uploaded ({file_id})")

        logger.info(
            "Batch %s for %s finished with status %s: %s",
            batch.id, vector_store_id, batch.status, report.counts,
        )
        return report

    async def _discard_uploads(self, names_by_id: Dict[str, str]) -> None:
        for file_id, name in names_by_id.items():
            try:
                await self.client.files.delete(file_id)
            except openai.APIError as e:
                err = describe_provider_error(e, best_effort_message(e))
                logger.error("Could not delete orphaned upload %s (%s): %s", file_id, name, err.log_detail)
            else:
                logger.info("Deleted orphaned upload %s (%s)", file_id, name)

    async def list_files(self, vector_store_id: str) -> List[Tuple[str, str]]:
        entries = []
        async for item in self.client.vector_stores.files.list(vector_store_id=vector_store_id):
            entries.append((item.id, item.status))
        return entries

    async def diagnose(self, api_key: str, vector_store_id: Optional[str], source: str) -> List[str]:
        """Collect a plain-text summary of the credential and the configured store."""
        masked = f"...{api_key[-4:]}" if len(api_key) >= 4 else "(too short)"
        lines = [f"OPENAI_API_KEY: {'set ' + masked if api_key else 'MISSING'}"]

        if self._client is None:
            lines.append(f"API key accepted: no ({MissingCredentials()})")
        else:
            try:
                model_count = 0
                async for _ in self._client.models.list():
                    model_count += 1
                lines.append(f"API key accepted: yes ({model_count} models visible)")
            except openai.APIError as e:
                err = describe_provider_error(e, best_effort_message(e))
                logger.error("Diagnostics: models.list failed: %s", err.log_detail)
                lines.append(f"API key accepted: no ({err.public_message})")

        if not vector_store_id:
            lines.append("Vector store: none configured")
            return lines

        valid = is_valid_vector_store_id(vector_store_id)
        lines.append(f"Vector store: {vector_store_id} (source: {source}, shape {'ok' if valid else 'INVALID'})")
        if not valid or self._client is None:
            return lines

        try:
            store = await self._client.vector_stores.retrieve(vector_store_id)
            counts = store.file_counts
            lines.append(
                f"Store status: {store.status} (files: total={counts.total}, "
                f"completed={counts.completed}, failed={counts.failed})"
            )
        except openai.APIError as e:
            err = describe_provider_error(e, best_effort_message(e))
            logger.error("Diagnostics: vector store lookup failed: %s", err.log_detail)
            lines.append(f"Store lookup failed: {err.public_message}")
        return lines
