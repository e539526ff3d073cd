import random

import pytest

from passcode.core.mfa.generator import RandomCodeGenerator, SecretsCodeGenerator


def test_secrets_generator_gives_six_digits_in_range():
    generator = SecretsCodeGenerator()
    for _ in range(500):
        code = generator.generate()
        assert len(code) == 6
        assert code.isdigit()
        assert 100000 <= int(code) <= 999999


def test_random_generator_is_reproducible_with_a_seed():
    first = RandomCodeGenerator(source=random.Random(42))
    second = RandomCodeGenerator(source=random.Random(42))
    assert [first.generate() for _ in range(5)] == [second.generate() for _ in range(5)]


def test_random_generator_respects_bounds():
    generator = RandomCodeGenerator(source=random.Random(7))
    codes = {int(generator.generate()) for _ in range(1000)}
    assert min(codes) >= 100000
    assert max(codes) <= 999999


def test_generator_width_is_configurable():
    generator = SecretsCodeGenerator(length=4)
    code = generator.generate()
    assert len(code) == 4
    assert 1000 <= int(code) <= 9999


@pytest.mark.parametrize('length', [-1, 7])
def test_generator_rejects_widths_the_column_cannot_hold(length):
    with pytest.raises(ValueError):
        SecretsCodeGenerator(length=length)
