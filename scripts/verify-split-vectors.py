#!/usr/bin/env python3
"""
Verify the split allocator and link codec against the shared vectors.
Run with: python scripts/verify-split-vectors.py

Other clients (the web pay page, mobile apps) must produce the same
shares and the same link query strings. This script checks the Python
implementation against fixtures/split-vectors.json.

IMPORTANT: This is a RELEASE GATE requirement. This script must pass
before any release.
"""
import json
import sys
from pathlib import Path

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT / 'python'))

from novi_sdk.codec import decode, encode_query  # noqa: E402
from novi_sdk.errors import DecodeError  # noqa: E402
from novi_sdk.split import allocate  # noqa: E402
from novi_sdk.types import PaymentIntent  # noqa: E402


def check_allocation(vector: dict) -> list:
    """
    Check one allocation vector.

    Returns:
        List of mismatch descriptions, empty on success
    """
    actual = allocate(vector['total'], vector['splitCount'])
    if actual != vector['shares']:
        return [f'Expected: {vector["shares"]}', f'Actual:   {actual}']
    return []


def check_link(vector: dict) -> list:
    """Check that an intent encodes to the expected query and decodes back."""
    intent = PaymentIntent.model_validate(vector['intent'])
    problems = []

    actual = encode_query(intent)
    if actual != vector['query']:
        problems += [f'Expected: {vector["query"]}', f'Actual:   {actual}']

    if decode(vector['query']) != intent:
        problems.append('Decoded intent differs from the source intent')
    return problems


def check_decode_error(vector: dict) -> list:
    """Check that a malformed query fails with the expected kind."""
    try:
        decode(vector['query'])
    except DecodeError as e:
        if e.kind.value != vector['kind']:
            return [f'Expected: {vector["kind"]}', f'Actual:   {e.kind.value}']
        return []
    return [f'Expected: {vector["kind"]}', 'Actual:   decoded without error']


def main() -> int:
    """
    Main verification function.

    Returns:
        0 if all vectors pass, 1 if any fail
    """
    fixtures_path = ROOT / 'fixtures' / 'split-vectors.json'

    if not fixtures_path.exists():
        print(f'ERROR: Fixtures file not found at {fixtures_path}')
        return 1

    with open(fixtures_path, encoding='utf-8') as f:
        data = json.load(f)

    checks = [
        ('allocations', check_allocation),
        ('links', check_link),
        ('decodeErrors', check_decode_error),
    ]

    passed = 0
    failed = 0

    print('Verifying Python implementation against split vectors...\n')

    for section, check in checks:
        for vector in data.get(section, []):
            name = f'{section}: {vector["name"]}'
            problems = check(vector)
            if not problems:
                print(f'[PASS] {name}')
                passed += 1
            else:
                print(f'[FAIL] {name}')
                for line in problems:
                    print(f'     {line}')
                failed += 1

    print(f'\n{"=" * 50}')
    print(f'Results: {passed} passed, {failed} failed')

    if failed > 0:
        print('\nVERIFICATION FAILED - Release gate not passed!')
        return 1

    print('\nVERIFICATION PASSED - Python implementation is correct.')
    return 0


if __name__ == '__main__':
    sys.exit(main())
