"""
Atomic file writer - ensures no partial writes or corrupted files.
Implements temp-write → fsync → rename pattern for durability.
"""

import os
import json
import logging
import tempfile
import time
from pathlib import Path
from typing import Dict, Any

logger = logging.getLogger(__name__)


class AtomicWriteError(Exception):
    """Raised when atomic write operations fail."""
    pass


def _replace_atomic(content: str, output_path: Path) -> None:
    """Write content to a temp file beside output_path, fsync, then rename over it."""
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        temp_fd, temp_path_str = tempfile.mkstemp(
            suffix='.tmp',
            prefix=f'{output_path.stem}_',
            dir=output_path.parent
        )
    except OSError as e:
        raise AtomicWriteError(f"Cannot create temp file for {output_path}: {e}") from e

    temp_path = Path(temp_path_str)

    try:
        with os.fdopen(temp_fd, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        # os.replace overwrites atomically on POSIX and Windows
        os.replace(temp_path, output_path)

    except OSError as e:
        if temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                logger.warning(f"Could not remove temp file {temp_path}")
        raise AtomicWriteError(f"Atomic write to {output_path} failed: {e}") from e


def write_text_atomic(content: str, output_path: Path) -> Dict[str, Any]:
    """
    Write text content atomically to prevent partial files.

    Args:
        content: Text to write
        output_path: Final path for the file

    Returns:
        Dictionary with write results ('status' is 'completed' or 'failed')
    """
    start_time = time.time()
    output_path = Path(output_path)

    try:
        _replace_atomic(content, output_path)
    except AtomicWriteError as e:
        logger.error(str(e))
        return {
            'status': 'failed',
            'error': str(e),
            'output_path': str(output_path),
            'bytes_written': 0,
            'duration_seconds': time.time() - start_time
        }

    logger.debug(f"Wrote {len(content)} bytes to {output_path}")

    return {
        'status': 'completed',
        'output_path': str(output_path),
        'bytes_written': len(content),
        'duration_seconds': time.time() - start_time
    }


def write_json_atomic(payload: Any, output_path: Path) -> Dict[str, Any]:
    """
    Serialize payload to JSON and write it atomically.

    Args:
        payload: JSON-serializable structure (dates are stringified)
        output_path: Path for the JSON file

    Returns:
        Dictionary with write results
    """
    try:
        # Serialize first so a bad payload never touches the disk
        json_content = json.dumps(payload, indent=2, default=str, allow_nan=False)
    except (TypeError, ValueError) as e:
        return {
            'status': 'failed',
            'error': f'JSON serialization failed: {e}',
            'output_path': str(output_path),
            'bytes_written': 0
        }

    return write_text_atomic(json_content, output_path)


def write_all_atomic(files: Dict[Path, str]) -> Dict[str, Any]:
    """
    Write several files atomically, all-or-nothing.

    If any write fails, files already written by this call are removed.

    Args:
        files: Content keyed by output path

    Returns:
        Dictionary with combined write results
    """
    written = []

    for path, content in files.items():
        result = write_text_atomic(content, Path(path))

        if result['status'] != 'completed':
            for done in written:
                try:
                    done.unlink()
                except OSError:
                    logger.warning(f"Could not roll back {done}")

            return {
                'status': 'failed',
                'error': result['error'],
                'paths_written': []
            }

        written.append(Path(path))

    return {
        'status': 'completed',
        'paths_written': [str(p) for p in written]
    }
