# tests/core/test_generators.py
import random
import re

import pytest

from cmdlang_shell.core.errors import UnexpectedTokenError
from cmdlang_shell.core.generators import ParameterGenerator


@pytest.fixture
def generator():
    return ParameterGenerator(random.Random(42))


def test_generator_keeps_type_of_lone_placeholder(generator):
    """Een losse generator behoudt het gegenereerde type."""
    assert generator.eval_value("$INT[5,5]") == 5
    assert isinstance(generator.eval_value("$FLOAT[1,2]"), float)


def test_generator_inside_text(generator):
    assert generator.eval_value("id-$INT[7,7]-x") == "id-7-x"


def test_generator_int_iter_counts_until_reset(generator):
    """$INTITER telt door per placeholder tot reset_stores()."""
    assert generator.eval(["$INTITER[10,5]", "$INTITER[10,5]", "$INTITER"]) == [10, 15, 1]
    generator.reset_stores()
    assert generator.eval_value("$INTITER[10,5]") == 10


def test_generator_formats(generator):
    assert generator.eval_value("$INTSEQ[1,4]") == "1,2,3,4"
    assert len(generator.eval_value("$STR[6,6]")) == 6
    assert re.fullmatch(r"[a-z0-9]+@[a-z0-9]+\.com", generator.eval_value("$EMAIL"))
    assert generator.eval_value("$URL").startswith("https://www.")
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", generator.eval_value("$DATE"))


def test_generator_leaves_other_values(generator):
    """Onbekende generators en niet-strings blijven ongewijzigd."""
    assert generator.eval([1, None, "$UNKNOWN", "plain"]) == [1, None, "$UNKNOWN", "plain"]


def test_generator_invalid_arguments(generator):
    with pytest.raises(UnexpectedTokenError):
        generator.eval_value("$INT[a,b]")


def test_generator_names(generator):
    assert "INTITER" in generator.names()
    assert generator.names() == sorted(generator.names())
