import string

import pytest

from dreamcatcher.errors import AllocationExhausted
from dreamcatcher.services.code_allocator import CodeAllocator

from conftest import ScriptedRandom


def _taken(*codes):
    async def exists(candidate: str) -> bool:
        return candidate in codes

    return exists


def test_client_codes_are_four_digits():
    allocator = CodeAllocator.for_client_codes()

    for _ in range(200):
        code = allocator.generate()
        assert len(code) == 4
        assert code.isdigit()


def test_access_keys_are_six_uppercase_alphanumerics():
    allocator = CodeAllocator.for_access_keys()
    allowed = set(string.ascii_uppercase + string.digits)

    for _ in range(200):
        code = allocator.generate()
        assert len(code) == 6
        assert set(code) <= allowed


async def test_allocate_skips_codes_that_exist():
    allocator = CodeAllocator.for_client_codes(rng=ScriptedRandom("1111", "2222", "3333"))

    code = await allocator.allocate(_taken("1111", "2222"))

    assert code == "3333"


async def test_allocate_gives_up_after_max_attempts():
    allocator = CodeAllocator.for_client_codes(max_attempts=3, rng=ScriptedRandom("1111" * 3))

    with pytest.raises(AllocationExhausted):
        await allocator.allocate(_taken("1111"))


async def test_allocate_stops_drawing_once_budget_is_spent():
    draws = []

    async def always_taken(candidate: str) -> bool:
        draws.append(candidate)
        return True

    allocator = CodeAllocator.for_access_keys(max_attempts=5)

    with pytest.raises(AllocationExhausted):
        await allocator.allocate(always_taken)
    assert len(draws) == 5


def test_rejects_degenerate_configuration():
    with pytest.raises(ValueError):
        CodeAllocator("", 4)
    with pytest.raises(ValueError):
        CodeAllocator(string.digits, 0)
