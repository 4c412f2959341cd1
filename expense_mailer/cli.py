from __future__ import annotations

import argparse
import json
import logging
import sys
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from expense_mailer.api import SEND_EXPENSE_REPORT_PATH, run_api_server
from expense_mailer.logging_utils import setup_logging
from expense_mailer.settings import load_settings

SAMPLE_PDF_BASE64 = (
    "JVBERi0xLjQKJeLjz9MKMSAwIG9iago8PC9UeXBlIC9DYXRhbG9nCi9QYWdlcyAyIDAgUgo+PgplbmRvYmoK"
    "MiAwIG9iago8PC9UeXBlIC9QYWdlcwovS2lkcyBbMyAwIFJdCi9Db3VudCAxCj4+CmVuZG9iagozIDAgb2Jq"
    "Cjw8L1R5cGUgL1BhZ2UKL1BhcmVudCAyIDAgUgovTWVkaWFCb3ggWzAgMCA2MTIgNzkyXQovQ29udGVudHMg"
    "NCAwIFIKPj4KZW5kb2JqCjQgMCBvYmoKPDwvTGVuZ3RoIDQ0Pj4Kc3RyZWFtCkJUCi9GMSAxMiBUZgooSGVs"
    "bG8gV29ybGQpIFRqCkVUCmVuZHN0cmVhbQplbmRvYmoKeHJlZgowIDUKMDAwMDAwMDAwMCA2NTUzNSBmIAow"
    "MDAwMDAwMDEwIDAwMDAwIG4gCjAwMDAwMDAwNTQgMDAwMDAgbiAKMDAwMDAwMDEwMyAwMDAwMCBuIAowMDAw"
    "MDAwMTU3IDAwMDAwIG4gCnRyYWlsZXIKPDwvU2l6ZSA1Ci9Sb290IDEgMCBSCj4+CnN0YXJ0eHJlZgoKMjAz"
    "CiUlRU9GCg=="
)
SAMPLE_SUBMISSION = {
    "name": "Test User",
    "email": "test@example.com",
    "pps": "1234567T",
    "pdfData": SAMPLE_PDF_BASE64,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="expense-mailer")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("api-run", help="serve the expense report endpoint")
    sample = sub.add_parser("send-sample", help="post a sample report to a running server")
    sample.add_argument("--url", default="http://localhost:3001")
    args = parser.parse_args(argv)

    if args.command == "send-sample":
        return send_sample(args.url)

    settings = load_settings()
    log_file = setup_logging(settings.log_level, args.command)
    logging.getLogger(__name__).info("logging to %s", log_file)
    run_api_server(settings)
    return 0


def send_sample(base_url: str) -> int:
    req = Request(
        base_url.rstrip("/") + SEND_EXPENSE_REPORT_PATH,
        data=json.dumps(SAMPLE_SUBMISSION).encode("utf-8"),
        method="POST",
        headers={"Content-Type": "application/json"},
    )
    try:
        with urlopen(req) as response:
            status = response.status
            body = response.read()
    except HTTPError as exc:
        status = exc.code
        body = exc.read()
    except URLError as exc:
        print(f"request failed: {exc.reason}", file=sys.stderr)
        return 1

    print(f"{status} {body.decode('utf-8', errors='replace')}")
    return 0 if 200 <= status < 300 else 1


if __name__ == "__main__":
    sys.exit(main())
