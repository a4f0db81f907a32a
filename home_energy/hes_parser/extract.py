"""PDF text extraction for HES reports."""
from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from io import BytesIO
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_PDF_BACKENDS = [
    "pypdf",
    "pdfminer",
    "pikepdf+pypdf",
    "pikepdf+pdfminer",
]

DEFAULT_MIN_PDF_CHARS = 200

PdfSource = bytes | bytearray | str | Path


def _dedupe(sequence: Iterable[str]) -> list[str]:
    seen = set()
    result: list[str] = []
    for item in sequence:
        if item and item not in seen:
            result.append(item)
            seen.add(item)
    return result


def resolve_backend_order(prefer_backends: Iterable[str] | None) -> list[str]:
    if prefer_backends:
        order = [backend.strip() for backend in prefer_backends if backend and backend.strip()]
    else:
        env_value = os.environ.get("HES_PDF_BACKENDS")
        if env_value:
            order = [backend.strip() for backend in env_value.split(",") if backend.strip()]
        else:
            order = list(DEFAULT_PDF_BACKENDS)
    return _dedupe(order) or list(DEFAULT_PDF_BACKENDS)


def resolve_min_pdf_chars(value: int | None) -> int:
    if value is not None:
        return max(value, 0)
    env_value = os.environ.get("HES_MIN_PDF_CHARS")
    if env_value:
        try:
            return max(int(env_value), 0)
        except ValueError:
            logger.debug("Invalid HES_MIN_PDF_CHARS value: %s", env_value)
    return DEFAULT_MIN_PDF_CHARS


def _is_xref_issue(message: str | None) -> bool:
    if not message:
        return False
    lowered = message.lower()
    return "xref" in lowered or "cross" in lowered


def read_pdf_bytes(source: PdfSource) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    return Path(source).read_bytes()


def extract_pdf_text(
    source: PdfSource,
    *,
    min_chars: int = DEFAULT_MIN_PDF_CHARS,
    prefer_backends: Iterable[str] | None = None,
) -> tuple[str, dict[str, Any]]:
    """Extract text from PDF bytes (or a path) using a cascade of backends.

    The longest text wins. The cascade stops at the first clean attempt that
    reaches ``min_chars``; ``pikepdf+`` backends re-save the document through
    pikepdf before extracting, which repairs broken cross-reference tables.
    Returns ``("", meta)`` when no backend reaches ``min_chars``.
    """

    data = read_pdf_bytes(source)
    backend_order = resolve_backend_order(prefer_backends)
    best_text = ""
    best_chars = 0
    best_backend = "none"
    best_repaired = False
    best_warnings: list[str] = []
    last_error: str | None = None
    all_warnings: list[str] = []
    any_repaired = False
    needs_repair_hint = False
    attempts_had_output = False
    repaired_data: bytes | None = None
    repair_error: str | None = None

    for backend_name in backend_order:
        use_repair = backend_name.startswith("pikepdf+")
        base_backend = backend_name.split("+", 1)[-1] if use_repair else backend_name
        attempt_warnings: list[str] = []
        attempt_error: str | None = None
        target = data

        if use_repair:
            if repaired_data is None and repair_error is None:
                try:
                    repaired_data = _repair_pdf_with_pikepdf(data)
                except Exception as exc:  # pragma: no cover - pikepdf errors vary
                    repair_error = str(exc)
                    logger.debug("pikepdf repair failed: %s", exc)
            if repaired_data is None:
                attempt_error = repair_error or "pikepdf repair unavailable"
                all_warnings.append(f"{backend_name}: pikepdf repair failed: {attempt_error}")
                last_error = attempt_error
                continue
            target = repaired_data
            attempt_warnings.append("pikepdf repair applied")
            any_repaired = True

        try:
            text, backend_warnings = _extract_with_backend(base_backend, target)
            attempt_warnings.extend(backend_warnings)
        except Exception as exc:  # pragma: no cover - backend errors depend on document
            attempt_error = str(exc)
            if _is_xref_issue(attempt_error):
                needs_repair_hint = True
            logger.debug("PDF backend %s failed: %s", base_backend, exc)
            text = ""

        chars = len(text)
        if text.strip():
            attempts_had_output = True
            if chars > best_chars:
                best_chars = chars
                best_text = text
                best_backend = backend_name
                best_repaired = use_repair
                best_warnings = list(attempt_warnings)
            if chars < min_chars:
                attempt_warnings.append(
                    f"extracted text shorter than min_chars ({chars} < {min_chars})"
                )
        else:
            attempt_warnings.append("extracted text empty")

        if any(_is_xref_issue(message) for message in attempt_warnings):
            needs_repair_hint = True
        if attempt_error:
            last_error = attempt_error
        all_warnings.extend(f"{backend_name}: {warning}" for warning in attempt_warnings)

        if chars >= min_chars and text.strip() and not needs_repair_hint and not attempt_error:
            break

    if best_chars >= min_chars and best_text.strip():
        logger.debug("Extracted %d chars with %s", best_chars, best_backend)
        return best_text, {
            "backend": best_backend,
            "bytes": len(data),
            "chars": best_chars,
            "warnings": _dedupe(best_warnings),
            "repaired": best_repaired,
            "error": None,
        }

    warnings_out = _dedupe(all_warnings)
    if best_chars and best_chars < min_chars:
        warnings_out.append(f"best text shorter than min_chars ({best_chars} < {min_chars})")
    if not attempts_had_output and not last_error:
        warnings_out.append("no backend produced text")
    return "", {
        "backend": "none",
        "bytes": len(data),
        "chars": best_chars,
        "warnings": _dedupe(warnings_out),
        "repaired": any_repaired,
        "error": last_error,
    }


def _extract_with_backend(backend: str, data: bytes) -> tuple[str, list[str]]:
    if backend == "pypdf":
        return _extract_with_pypdf(data)
    if backend == "pdfminer":
        return _extract_with_pdfminer(data)
    raise RuntimeError(f"unknown backend: {backend}")


def _extract_with_pypdf(data: bytes) -> tuple[str, list[str]]:
    warnings: list[str] = []
    try:
        from pypdf import PdfReader
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("pypdf is not installed") from exc

    try:
        reader = PdfReader(BytesIO(data))
    except Exception as exc:  # pragma: no cover - upstream errors vary
        raise RuntimeError(str(exc)) from exc

    pages: list[str] = []
    for page_number, page in enumerate(reader.pages, start=1):
        try:
            text = page.extract_text() or ""
        except Exception as exc:  # pragma: no cover - depends on document
            warnings.append(f"page {page_number}: {exc}")
            text = ""
        pages.append(text)
    return "\n".join(pages), warnings


def _extract_with_pdfminer(data: bytes) -> tuple[str, list[str]]:
    try:
        from pdfminer.high_level import extract_text
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("pdfminer.six is not installed") from exc

    try:
        text = extract_text(BytesIO(data))
    except Exception as exc:  # pragma: no cover - upstream errors vary
        raise RuntimeError(str(exc)) from exc
    return text or "", []


def _repair_pdf_with_pikepdf(data: bytes) -> bytes:
    try:
        from pikepdf import Pdf  # type: ignore[attr-defined]
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("pikepdf is not installed") from exc

    output = BytesIO()
    try:
        with Pdf.open(BytesIO(data)) as pdf:
            pdf.save(output)
    except Exception as exc:  # pragma: no cover - upstream errors vary
        raise RuntimeError(str(exc)) from exc
    return output.getvalue()
