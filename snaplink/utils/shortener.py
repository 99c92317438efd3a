"""Short code generation and validation

Short codes are drawn from a fixed 64-character alphabet:
26 lowercase + 26 uppercase + 10 digits + '_' + '-'.

Generation is optimistic: a random candidate is checked against the store
and returned as soon as it is free. The check does not close the race between
two concurrent requests drawing the same candidate; the store's uniqueness
constraint does (see LinkService.create_short_url).

Functions:
    validate_shortcode(shortcode) -> str
        Ensure a caller-chosen code matches the alphabet and length rules.
    random_shortcode(length) -> str
        Draw a uniformly random code from a cryptographically strong source.
    fallback_shortcode(length) -> str
        Build a timestamp-based code used when random attempts keep colliding.
    generate_shortcode(exists, length=6) -> str
        Generate a code which is not yet taken according to `exists`.

Example:
    >>> from snaplink.utils import generate_shortcode
    >>> generate_shortcode(dao.exists, length=6)
    'q_3Zr-'
"""

import re
import time
import logging
import secrets
import string
from collections.abc import Callable

from snaplink.constants import Default, Limit
from snaplink.exceptions import InvalidShortCodeFormatError, GenerationExhaustedError


logger = logging.getLogger(__name__)

ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits + '_-'
BASE = len(ALPHABET)
BASE36_ALPHABET = string.digits + string.ascii_lowercase
FALLBACK_RANDOM_LENGTH = 6

SHORTCODE_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')

# Bytes at or above this bound are rejected so `byte % BASE` stays uniform.
# With a 64-character alphabet the bound is 256 and nothing is ever rejected.
_BYTE_BOUND = 256 - (256 % BASE)


def validate_shortcode(shortcode: str) -> str:
    """Ensure a short code uses only [A-Za-z0-9_-] and is 4-10 characters long

    Returns:
        str: the validated short code.

    Raises:
        InvalidShortCodeFormatError:
            If the code violates the alphabet or length rules.

    Example:
        >>> validate_shortcode('ab')
        Traceback (most recent call last):
            ...
        snaplink.exceptions.InvalidShortCodeFormatError: Short code must be 4-10 characters long (given length: 2).
    """
    if not isinstance(shortcode, str) or not SHORTCODE_PATTERN.match(shortcode):
        raise InvalidShortCodeFormatError(f'Short code may only contain letters, digits, hyphens and underscores (given value: {shortcode!r}).')
    if not Limit.SHORTCODE_MIN_LENGTH <= len(shortcode) <= Limit.SHORTCODE_MAX_LENGTH:
        raise InvalidShortCodeFormatError(
            f'Short code must be {Limit.SHORTCODE_MIN_LENGTH}-{Limit.SHORTCODE_MAX_LENGTH} characters long (given length: {len(shortcode)}).'
        )
    return shortcode


def random_shortcode(length: int = Default.SHORTCODE_LENGTH) -> str:
    """Draw `length` alphabet characters from os.urandom-backed random bytes"""
    chars = []
    while len(chars) < length:
        for byte in secrets.token_bytes(length - len(chars)):
            if byte < _BYTE_BOUND:
                chars.append(ALPHABET[byte % BASE])
    return ''.join(chars)


def _base36(number: int) -> str:
    digits = []
    while True:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
        if number == 0:
            return ''.join(reversed(digits))


def fallback_shortcode(length: int = Default.SHORTCODE_LENGTH) -> str:
    """Build a code from the current millisecond timestamp plus random base36 characters

    The result is the base36 timestamp followed by 6 random base36 characters,
    cut to max(length, 8) characters.

    Example:
        >>> fallback_shortcode(6)
        'mgx3k2a9'
    """
    timestamp = _base36(int(time.time() * 1000))
    suffix = ''.join(secrets.choice(BASE36_ALPHABET) for _ in range(FALLBACK_RANDOM_LENGTH))
    return (timestamp + suffix)[: max(length, Default.FALLBACK_SHORTCODE_MIN_LENGTH)]


def generate_shortcode(
    exists: Callable[[str], bool],
    length: int = Default.SHORTCODE_LENGTH,
    attempts: int = Limit.SHORTCODE_GENERATION_ATTEMPTS,
) -> str:
    """Generate a short code which is not taken yet

    Args:
        exists (Callable[[str], bool]):
            Store lookup returning True when a code is already taken.

        length (int, optional):
            Length of the random codes, between 4 and 10. Defaults to 6.

        attempts (int, optional):
            Number of random candidates to try before the fallback. Defaults to 50.

    Returns:
        str: a free short code. Fallback codes are at least 8 characters long.

    Raises:
        ValueError:
            If `length` is outside the 4-10 range.
        GenerationExhaustedError:
            If every random candidate and the fallback code are taken.
    """
    if not Limit.SHORTCODE_MIN_LENGTH <= length <= Limit.SHORTCODE_MAX_LENGTH:
        raise ValueError(f'Short code length must be between {Limit.SHORTCODE_MIN_LENGTH} and {Limit.SHORTCODE_MAX_LENGTH} (given value: {length}).')

    for attempt in range(attempts):
        candidate = random_shortcode(length)
        if not exists(candidate):
            if attempt:
                logger.info('Generated short code after collisions.', extra={'attempts': attempt + 1})
            return candidate

    candidate = fallback_shortcode(length)
    logger.warning('Random short codes exhausted, trying fallback code.', extra={'attempts': attempts, 'shortcode': candidate})
    if not exists(candidate):
        return candidate

    raise GenerationExhaustedError(f'Unable to generate a unique short code after {attempts} attempts and fallback.')
