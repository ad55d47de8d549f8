"""
Follow-Through Tracer

Step-by-step tracing of membership flows (join, leave, handoff,
profile sync) and the document writes they make. Silent unless
FOLLOW_THROUGH is enabled.
"""
import logging
from typing import Any
from datetime import datetime

from .config import settings

# Dedicated logger for follow-through tracing
tracer = logging.getLogger("followthrough")


def _preview(data: Any, max_len: int = 60) -> str:
    """Create a short preview of data."""
    if data is None:
        return "<None>"
    text = str(data)
    if len(text) > max_len:
        return f"{text[:max_len]}..."
    return text


def _format_step(icon: str, step: str, module: str, detail: str = "") -> str:
    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    base = f"[{timestamp}] {icon} [{module}] {step}"
    if detail:
        return f"{base}: {detail}"
    return base


def trace_section(title: str):
    """Log a divider at the start of a flow."""
    if not settings.follow_through:
        return
    bar = "─" * 40
    tracer.info(f"\n{bar}")
    tracer.info(f"  {title.upper()}")
    tracer.info(f"{bar}")


def trace_step(module: str, description: str):
    """Log a general step in processing."""
    if not settings.follow_through:
        return
    tracer.info(_format_step("•", "STEP", module, description))


def trace_transition(module: str, uid: str, from_state: Any, to_state: Any):
    """Log a membership state change for one user."""
    if not settings.follow_through:
        return
    detail = f"{uid}: {getattr(from_state, 'value', from_state)} -> {getattr(to_state, 'value', to_state)}"
    tracer.info(_format_step("⇄", "TRANSITION", module, detail))


def trace_write(module: str, operation: str, path: str, data: Any = None):
    """Log a document write about to be made."""
    if not settings.follow_through:
        return
    detail = f"{operation} {path}"
    if data is not None:
        detail += f" ({_preview(data)})"
    tracer.info(_format_step("✎", "WRITE", module, detail))


def trace_result(module: str, operation: str, success: bool, result_preview: Any = None):
    """Log how an operation ended."""
    if not settings.follow_through:
        return
    status = "✓ SUCCESS" if success else "✗ FAILED"
    detail = f"{operation} {status}"
    if result_preview is not None:
        detail += f" => {_preview(result_preview)}"
    tracer.info(_format_step("◀", "RESULT", module, detail))


def setup_follow_through_logging():
    """Configure the follow-through logger."""
    if settings.follow_through:
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter('%(message)s'))

        tracer.addHandler(handler)
        tracer.setLevel(logging.INFO)
        tracer.propagate = False  # Don't propagate to root logger

        tracer.info("\n" + "=" * 50)
        tracer.info("  FOLLOW-THROUGH MODE ENABLED")
        tracer.info("  Tracing membership flows...")
        tracer.info("=" * 50 + "\n")
