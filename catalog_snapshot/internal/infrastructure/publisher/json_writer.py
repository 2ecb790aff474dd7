"""
JSON document writer.

Serializes the catalog document to UTF-8 JSON at a configurable path.
"""
import json
from pathlib import Path
from typing import Union

from catalog_snapshot.internal.domain.errors import PublishError
from catalog_snapshot.internal.transport.document.dto import CatalogDocument
from catalog_snapshot.pkg.logger.logger import get_logger


logger = get_logger(__name__)

PRETTY_INDENT = 4


def render_document(document: CatalogDocument, pretty: bool = True) -> str:
    """
    Render the document as JSON text.

    Member order follows the document model; non-ASCII text and slashes are
    written unescaped.

    Args:
        document: Catalog document.
        pretty: Indent the output.

    Returns:
        JSON text terminated by a newline.
    """
    payload = document.model_dump(mode="json")
    if pretty:
        text = json.dumps(payload, ensure_ascii=False, indent=PRETTY_INDENT)
    else:
        text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return text + "\n"


def write_document(
    document: CatalogDocument,
    output_path: Union[str, Path],
    pretty: bool = True,
) -> Path:
    """
    Write the document to disk, creating parent directories.

    Args:
        document: Catalog document.
        output_path: Destination file.
        pretty: Indent the output.

    Returns:
        The written path.

    Raises:
        PublishError: If encoding or writing fails.
    """
    path = Path(output_path)

    try:
        text = render_document(document, pretty)
    except (TypeError, ValueError) as e:
        raise PublishError(str(path), f"JSON encoding failed: {e}") from e

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise PublishError(str(path), str(e)) from e

    logger.info(
        "Catalog document written",
        path=str(path),
        size_bytes=len(text.encode("utf-8")),
    )
    return path
