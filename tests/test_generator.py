"""
Tests for code generation.
"""

import pytest

from conftest import sequence_randbelow


class TestGenerateNumericCode:
    """Tests for the raw numeric code draw."""

    def test_exact_length_and_digits(self):
        """Should return exactly `length` digits parseable below 10^length."""
        from otp_login.codes import generate_numeric_code

        for length in range(1, 11):
            code = generate_numeric_code(length)

            assert len(code) == length
            assert code.isdigit()
            assert 0 <= int(code) < 10 ** length

    def test_zero_padded(self):
        """Small values should be left-padded with zeros."""
        from otp_login.codes import generate_numeric_code

        assert generate_numeric_code(6, randbelow=lambda upper: 7) == "000007"
        assert generate_numeric_code(6, randbelow=lambda upper: 42917) == "042917"
        assert generate_numeric_code(4, randbelow=lambda upper: 0) == "0000"

    def test_draws_over_full_range(self):
        """Upper bound passed to the random source should cover every code."""
        from otp_login.codes import generate_numeric_code

        bounds = []

        def capture(upper):
            bounds.append(upper)
            return upper - 1

        assert generate_numeric_code(6, randbelow=capture) == "999999"
        assert bounds == [10 ** 6]

    def test_range_coverage(self):
        """Single-digit codes should hit every digit over many draws."""
        from otp_login.codes import generate_numeric_code

        seen = {generate_numeric_code(1) for _ in range(500)}

        assert seen == set("0123456789")

    def test_invalid_length(self):
        """Zero or negative lengths are rejected."""
        from otp_login.codes import generate_numeric_code

        with pytest.raises(ValueError):
            generate_numeric_code(0)


class TestCodeGenerator:
    """Tests for collision-aware generation."""

    @pytest.mark.asyncio
    async def test_resamples_on_active_collision(self, clock):
        """Should skip values held by active codes."""
        from otp_login.codes import CodeGenerator, InMemoryCodeStore

        store = InMemoryCodeStore(clock=clock.now)
        await store.issue("a@x.com", "111111", 120)

        generator = CodeGenerator(store, length=6, randbelow=sequence_randbelow(111111, 222222))

        assert await generator.generate() == "222222"

    @pytest.mark.asyncio
    async def test_expired_codes_do_not_collide(self, clock):
        """Expired codes free their value for reuse."""
        from otp_login.codes import CodeGenerator, InMemoryCodeStore

        store = InMemoryCodeStore(clock=clock.now)
        await store.issue("a@x.com", "111111", 120)
        clock.advance(121)

        generator = CodeGenerator(store, length=6, randbelow=sequence_randbelow(111111))

        assert await generator.generate() == "111111"

    @pytest.mark.asyncio
    async def test_length_override(self, clock):
        """generate(length) should override the configured length."""
        from otp_login.codes import CodeGenerator, InMemoryCodeStore

        generator = CodeGenerator(InMemoryCodeStore(clock=clock.now), length=6)

        code = await generator.generate(8)

        assert len(code) == 8
        assert code.isdigit()

    @pytest.mark.asyncio
    async def test_zero_length_override_is_rejected(self, clock):
        """generate(0) is an invalid length, not a request for the default."""
        from otp_login.codes import CodeGenerator, InMemoryCodeStore

        generator = CodeGenerator(InMemoryCodeStore(clock=clock.now), length=6)

        with pytest.raises(ValueError):
            await generator.generate(0)

    @pytest.mark.asyncio
    async def test_saturated_code_space_is_bounded(self, clock):
        """Should fail instead of looping when every code is active."""
        from otp_login.codes import CodeGenerator, InMemoryCodeStore
        from otp_login.errors import CodeSpaceExhausted, InfrastructureError

        store = InMemoryCodeStore(clock=clock.now)
        for digit in range(10):
            await store.issue(f"user{digit}@x.com", str(digit), 120)

        generator = CodeGenerator(store, length=1, max_attempts=20)

        with pytest.raises(CodeSpaceExhausted) as exc_info:
            await generator.generate()

        assert isinstance(exc_info.value, InfrastructureError)
        assert exc_info.value.attempts == 20
