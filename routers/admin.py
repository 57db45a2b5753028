from contextlib import AsyncExitStack
from pathlib import Path
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import HTMLResponse, PlainTextResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.config import Settings
from core.errors import AdminError, admin_failure
from core.log import get_logger
from dependencies.auth import require_admin
from dependencies.services import get_config_store, get_settings, get_vector_store_service
from services.config_store import ConfigStore, is_valid_vector_store_id
from services.staging import FileRejected, check_extension, display_name, staged_upload
from services.vector_store import VectorStoreService

router = APIRouter(dependencies=[Depends(require_admin)])
logger = get_logger("admin")

template_dir = Path(__file__).parent.parent / "templates"
jinja_env = Environment(
    loader=FileSystemLoader(str(template_dir)),
    autoescape=select_autoescape(["html", "xml"]),
)


def check_vector_store_shape(vector_store_id: str) -> str:
    if not is_valid_vector_store_id(vector_store_id):
        raise AdminError(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Configured vector store id {vector_store_id!r} is not valid: "
                "expected 'vs_' followed by letters, digits, '_' or '-'. "
                "Check VECTOR_STORE_ID or recreate the store."
            ),
        )
    return vector_store_id


def require_vector_store_id(config_store: ConfigStore) -> str:
    vector_store_id = config_store.get_vector_store_id()
    if not vector_store_id:
        raise AdminError(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='No vector store set. Click "Create Vector Store" first.',
        )
    return check_vector_store_shape(vector_store_id)


@router.get("", response_class=HTMLResponse)
async def admin_page(settings: Settings = Depends(get_settings)):
    template = jinja_env.get_template("admin.html")
    return template.render(
        app_name=settings.app_name,
        accept=",".join(settings.allowed_extensions),
        max_file_size_mb=settings.max_file_size_mb,
    )


@router.post("/create", response_class=PlainTextResponse)
async def create_store(
    settings: Settings = Depends(get_settings),
    config_store: ConfigStore = Depends(get_config_store),
    service: VectorStoreService = Depends(get_vector_store_service),
):
    try:
        vector_store_id = await service.create_store(settings.vector_store_name)
    except Exception as e:
        report = admin_failure("Failed to create store", e)
        logger.exception("Create store failed: %s", report.log_detail)
        raise AdminError(status_code=500, detail=report.public_message)

    if config_store.env_override:
        note = (
            f"(VECTOR_STORE_ID={config_store.env_override} is set in the environment and still takes "
            f"precedence; update it to {vector_store_id} to use the new store.)"
        )
    else:
        config_store.set_vector_store_id(vector_store_id)
        note = f"(Also add VECTOR_STORE_ID={vector_store_id} to your environment for persistence.)"
    return f"Vector store created: {vector_store_id}\n{note}"


@router.post("/upload", response_class=PlainTextResponse)
async def upload_files(
    files: Optional[List[UploadFile]] = File(None),
    settings: Settings = Depends(get_settings),
    config_store: ConfigStore = Depends(get_config_store),
    service: VectorStoreService = Depends(get_vector_store_service),
):
    vector_store_id = require_vector_store_id(config_store)
    if not files:
        raise AdminError(status_code=status.HTTP_400_BAD_REQUEST, detail="No files attached.")

    max_bytes = settings.max_file_size_mb * 1024 * 1024
    rejected: List[str] = []
    accepted: List[UploadFile] = []
    for upload in files:
        try:
            check_extension(display_name(upload), settings.allowed_extensions)
        except FileRejected as e:
            rejected.append(f"{display_name(upload)} -> rejected: {e}")
            continue
        accepted.append(upload)

    try:
        # Every staged file is deleted when the stack unwinds, on any exit path.
        async with AsyncExitStack() as stack:
            staged: List[Tuple[str, Path]] = []
            for upload in accepted:
                try:
                    path = await stack.enter_async_context(staged_upload(upload, settings.upload_dir, max_bytes))
                except FileRejected as e:
                    rejected.append(f"{display_name(upload)} -> rejected: {e}")
                    continue
                staged.append((display_name(upload), path))

            if not staged:
                raise AdminError(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="\n".join(["No valid files to upload."] + rejected),
                )
            report = await service.upload_files(vector_store_id, staged)
    except AdminError:
        raise
    except Exception as e:
        failure = admin_failure("Upload failed", e)
        logger.exception("Upload to %s failed: %s", vector_store_id, failure.log_detail)
        raise AdminError(status_code=500, detail=failure.public_message)

    report.lines.extend(rejected)
    return report.as_text()


@router.get("/status", response_class=PlainTextResponse)
async def store_status(
    config_store: ConfigStore = Depends(get_config_store),
    service: VectorStoreService = Depends(get_vector_store_service),
):
    vector_store_id = config_store.get_vector_store_id()
    if not vector_store_id:
        return "No vector store configured yet."
    check_vector_store_shape(vector_store_id)
    try:
        entries = await service.list_files(vector_store_id)
    except Exception as e:
        report = admin_failure("Status error", e)
        logger.exception("Status for %s failed: %s", vector_store_id, report.log_detail)
        raise AdminError(status_code=500, detail=report.public_message)

    lines = [f"Vector store: {vector_store_id}", f"Files: {len(entries)}"]
    lines.extend(f"- {file_id} ({file_status})" for file_id, file_status in entries)
    return "\n".join(lines)


@router.get("/diag", response_class=PlainTextResponse)
async def diagnostics(
    settings: Settings = Depends(get_settings),
    config_store: ConfigStore = Depends(get_config_store),
    service: VectorStoreService = Depends(get_vector_store_service),
):
    vector_store_id, source = config_store.lookup()
    lines = await service.diagnose(settings.openai_api_key, vector_store_id, source)
    return "\n".join(lines)
