#!/usr/bin/env python3
"""
Dev helper: send a study-assist request to the local StudyBuddy backend.

Attaches a real file (or a generated sample text file) as a legacy inline
attachment, encoded in any of the payload shapes the backend accepts, and
POST-s it to /api/gemini/assist. With --drive-file-id it instead stages a
Google Drive document via /api/gemini/upload-file and then asks about it
through ``fileUris``.

Usage
-----
# Basic: generated sample file, base64 encoding, targeting localhost:8000
python scripts/send_study_assist.py

# Send a specific file as a serialized Buffer
python scripts/send_study_assist.py --file notes.pdf --encoding buffer

# Stage a Drive document first, then ask about it
python scripts/send_study_assist.py --drive-file-id 1AbC... --access-token ya29...

# Print the payload without sending it
python scripts/send_study_assist.py --dry-run
"""

import argparse
import base64
import json
import mimetypes
import sys
import textwrap
from pathlib import Path

import httpx


# ---------------------------------------------------------------------------
# Payload encoders (one per accepted fileData.data shape)
# ---------------------------------------------------------------------------

def _encode_base64(content: bytes) -> dict:
    return {"data": base64.b64encode(content).decode(), "encoding": "base64"}


def _encode_text(content: bytes) -> dict:
    return {"data": content.decode("utf-8")}


def _encode_buffer(content: bytes) -> dict:
    return {"data": {"type": "Buffer", "data": list(content)}}


def _encode_array(content: bytes) -> dict:
    return {"data": list(content)}


def _encode_indexed(content: bytes) -> dict:
    return {"data": {str(i): b for i, b in enumerate(content)}}


_ENCODERS = {
    "base64": _encode_base64,
    "text": _encode_text,
    "buffer": _encode_buffer,
    "array": _encode_array,
    "indexed": _encode_indexed,
}


def _make_sample_notes() -> bytes:
    lines = [
        "Photosynthesis - chapter 4 notes",
        "Light reactions happen in the thylakoid membrane.",
        "The Calvin cycle happens in the stroma.",
    ]
    return "\n".join(lines).encode()


def _print_response(response: httpx.Response) -> None:
    status = response.status_code
    symbol = "OK" if status == 200 else "FAIL"
    print(f"\n[{symbol}] HTTP {status}")
    try:
        print(json.dumps(response.json(), indent=2))
    except ValueError:
        print(response.text)


def _build_attachment(path: Path | None, encoding: str) -> dict:
    if path:
        content = path.read_bytes()
        name = path.name
        mime_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
    else:
        content = _make_sample_notes()
        name = "sample_notes.txt"
        mime_type = "text/plain"

    file_data = _ENCODERS[encoding](content)
    file_data.update({"mimeType": mime_type, "fileExtension": Path(name).suffix})
    return {"name": name, "mimeType": mime_type, "content": "", "fileData": file_data}


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="send_study_assist.py",
        description="Send a study-assist request to the StudyBuddy backend.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            Examples:
              python scripts/send_study_assist.py
              python scripts/send_study_assist.py --file notes.pdf --encoding indexed
              python scripts/send_study_assist.py --drive-file-id ID --access-token TOKEN
        """),
    )
    parser.add_argument("--url", default="http://localhost:8000",
                        help="Backend base URL (default: http://localhost:8000)")
    parser.add_argument("--prompt", default="Summarize the attached notes in three bullet points.")
    parser.add_argument("--file", default=None, metavar="PATH",
                        help="File to attach. A sample text file is used if omitted.")
    parser.add_argument("--encoding", default="base64", choices=list(_ENCODERS),
                        help="fileData shape to send (default: base64)")
    parser.add_argument("--drive-file-id", default=None,
                        help="Stage this Drive document instead of sending inline bytes")
    parser.add_argument("--access-token", default=None,
                        help="Google OAuth access token (required with --drive-file-id)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Print the payload JSON without sending it.")
    args = parser.parse_args()

    base_url = args.url.rstrip("/")
    timeout = httpx.Timeout(120.0)

    if args.drive_file_id:
        if not args.access_token:
            print("ERROR: --access-token is required with --drive-file-id", file=sys.stderr)
            return 1
        upload_body = {"driveFileId": args.drive_file_id, "accessToken": args.access_token}
        if args.dry_run:
            print(json.dumps({**upload_body, "accessToken": "<redacted>"}, indent=2))
            return 0
        response = httpx.post(f"{base_url}/api/gemini/upload-file", json=upload_body, timeout=timeout)
        _print_response(response)
        if response.status_code != 200:
            return 1
        staged = response.json()
        payload = {
            "prompt": args.prompt,
            "fileUris": [{
                "uri": staged["fileUri"],
                "mimeType": staged["mimeType"],
                "displayName": staged["displayName"],
            }],
        }
    else:
        file_path = Path(args.file) if args.file else None
        if file_path and not file_path.exists():
            print(f"ERROR: File not found: {file_path}", file=sys.stderr)
            return 1
        payload = {"prompt": args.prompt, "attachments": [_build_attachment(file_path, args.encoding)]}

    if args.dry_run:
        print(json.dumps(payload, indent=2)[:4000])
        return 0

    response = httpx.post(f"{base_url}/api/gemini/assist", json=payload, timeout=timeout)
    _print_response(response)
    return 0 if response.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
