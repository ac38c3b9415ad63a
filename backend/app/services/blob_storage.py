# app/services/blob_storage.py

import logging
import uuid
import os
from typing import NamedTuple, Optional

# --- Azure SDK Imports ---
from azure.storage.blob.aio import BlobServiceClient, BlobClient
from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.storage.blob import ContentSettings

from ..core.config import AZURE_BLOB_CONNECTION_STRING, AZURE_BLOB_CONTAINER_NAME

logger = logging.getLogger(__name__)

class StoredBlob(NamedTuple):
    name: str
    url: str

# --- Blob Service Client (Cached) ---
_blob_service_client: Optional[BlobServiceClient] = None

def get_blob_service_client() -> Optional[BlobServiceClient]:
    """Gets or creates the async BlobServiceClient instance."""
    global _blob_service_client
    if _blob_service_client is None:
        if not AZURE_BLOB_CONNECTION_STRING:
            logger.error("Azure Blob Storage connection string is not configured.")
            return None
        try:
            _blob_service_client = BlobServiceClient.from_connection_string(
                conn_str=AZURE_BLOB_CONNECTION_STRING
            )
            logger.info("BlobServiceClient initialized.")
        except ValueError as e:
            logger.error(f"Invalid Blob Storage connection string format: {e}")
            return None
    return _blob_service_client

async def close_blob_service_client() -> None:
    global _blob_service_client
    if _blob_service_client is not None:
        await _blob_service_client.close()
        _blob_service_client = None
        logger.info("BlobServiceClient closed.")

def generate_blob_name(original_filename: Optional[str]) -> str:
    """Random blob name that keeps only the original extension."""
    _, file_extension = os.path.splitext(original_filename or "")
    return f"{uuid.uuid4()}{file_extension.lower()}"

# --- File Upload Function ---

async def upload_file_to_blob(
    data: bytes,
    original_filename: Optional[str],
    content_type: Optional[str],
) -> Optional[StoredBlob]:
    """
    Uploads bytes to Azure Blob Storage under a generated name.

    Args:
        data: The already-validated file content.
        original_filename: Client-supplied name, used only for its extension.
        content_type: MIME type recorded on the blob.

    Returns:
        The blob name and URL if successful, otherwise None.
    """
    service_client = get_blob_service_client()
    if not service_client or not AZURE_BLOB_CONTAINER_NAME:
        logger.error("Blob storage service client or container name not available.")
        return None

    blob_name = generate_blob_name(original_filename)
    logger.info(f"Attempting to upload '{original_filename}' ({len(data)} bytes) as blob '{blob_name}' to container '{AZURE_BLOB_CONTAINER_NAME}'...")

    try:
        blob_client: BlobClient = service_client.get_blob_client(
            container=AZURE_BLOB_CONTAINER_NAME,
            blob=blob_name
        )
        content_settings = ContentSettings(content_type=content_type) if content_type else None
        await blob_client.upload_blob(data=data, overwrite=False, content_settings=content_settings)
        logger.info(f"Successfully uploaded '{original_filename}' to blob: {blob_name}")
        return StoredBlob(name=blob_name, url=blob_client.url)

    except AzureError as e:
        logger.error(f"Azure error during blob upload for {blob_name}: {e}", exc_info=True)
        return None

async def download_blob_as_bytes(blob_name: str) -> Optional[bytes]:
    """
    Downloads the content of a specific blob.

    Returns:
        The content of the blob as bytes, or None if the blob doesn't exist
        or an error occurs during download.
    """
    service_client = get_blob_service_client()
    if not service_client or not AZURE_BLOB_CONTAINER_NAME:
        logger.error("Blob storage service client or container name not available for download.")
        return None

    logger.debug(f"Attempting to download blob '{blob_name}' from container '{AZURE_BLOB_CONTAINER_NAME}'")
    try:
        blob_client: BlobClient = service_client.get_blob_client(
            container=AZURE_BLOB_CONTAINER_NAME,
            blob=blob_name
        )
        download_stream = await blob_client.download_blob()
        file_bytes = await download_stream.readall()
        logger.info(f"Successfully downloaded {len(file_bytes)} bytes from blob '{blob_name}'.")
        return file_bytes

    except ResourceNotFoundError:
        logger.warning(f"Blob '{blob_name}' not found during download attempt (ResourceNotFoundError).")
        return None
    except AzureError as ae:
        logger.error(f"Azure error downloading blob '{blob_name}': {ae}", exc_info=False)
        return None

async def delete_blob(blob_name: str) -> bool:
    """
    Deletes a blob. A blob that is already gone counts as deleted.

    Returns:
        True if the blob was deleted or was not found, False on any other error.
    """
    service_client = get_blob_service_client()
    if not service_client or not AZURE_BLOB_CONTAINER_NAME:
        return False

    logger.info(f"Attempting to delete blob '{blob_name}' from container '{AZURE_BLOB_CONTAINER_NAME}'")
    try:
        blob_client: BlobClient = service_client.get_blob_client(
            container=AZURE_BLOB_CONTAINER_NAME,
            blob=blob_name
        )
        await blob_client.delete_blob(delete_snapshots="include")
        logger.info(f"Successfully deleted blob '{blob_name}'.")
        return True

    except ResourceNotFoundError:
        logger.warning(f"Blob '{blob_name}' not found during deletion attempt. Considered successful.")
        return True
    except AzureError as ae:
        logger.error(f"Azure error deleting blob '{blob_name}': {ae}", exc_info=False)
        return False
