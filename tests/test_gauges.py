"""Tests for gauge label and percentage computation."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from multimeter.ui.design_system import get_gauge_level
from multimeter.ui.gauges import CPU_ERROR_LABEL, MEM_ERROR_LABEL, compute_gauge_display


def test_half_used_readings():
    display = compute_gauge_display(50, 100, 1048576, 2097152)

    assert display.cpu_label == "CPU:  50/100"
    assert display.mem_label == "Mem: 1024K/2048K"
    assert display.cpu_percent == 50
    assert display.mem_percent == 50
    assert not display.cpu_error
    assert not display.mem_error


def test_fractional_cpu_is_truncated_in_label():
    display = compute_gauge_display(12.7, 20, 0, 2097152)

    assert display.cpu_label == "CPU:  12/ 20"
    assert display.cpu_percent == pytest.approx(63.5)


@pytest.mark.parametrize("cpu", ["oops", None, float("nan"), True, [], {}])
def test_non_numeric_cpu_shows_alarm(cpu):
    display = compute_gauge_display(cpu, 100, 1024, 2097152)

    assert display.cpu_label == CPU_ERROR_LABEL
    assert display.cpu_percent == 100
    assert display.cpu_error
    assert display.mem_label == "Mem:    1K/2048K"


@pytest.mark.parametrize("limit", [0, -5, None, "abc"])
def test_unusable_cpu_limit_shows_alarm(limit):
    display = compute_gauge_display(10, limit, 1024, 2097152)

    assert display.cpu_label == CPU_ERROR_LABEL
    assert display.cpu_percent == 100


def test_missing_memory_shows_alarm():
    display = compute_gauge_display(5, 20, None, 2097152)

    assert display.mem_label == MEM_ERROR_LABEL
    assert display.mem_error
    assert display.cpu_label == "CPU:   5/ 20"


def test_overshoot_is_kept_unless_clamped():
    raw = compute_gauge_display(150, 100, 3 * 1048576, 2097152)
    clamped = compute_gauge_display(150, 100, 3 * 1048576, 2097152, clamp=True)

    assert raw.cpu_percent == 150
    assert raw.mem_percent == 150
    assert clamped.cpu_percent == 100
    assert clamped.mem_percent == 100


@given(cpu=st.text().filter(lambda s: s.strip() and not _is_float(s)), limit=st.integers())
def test_non_numeric_cpu_alarm_regardless_of_limit(cpu, limit):
    display = compute_gauge_display(cpu, limit, 0, 2097152)

    assert display.cpu_label == CPU_ERROR_LABEL
    assert display.cpu_percent == 100


def _is_float(text):
    try:
        float(text)
    except ValueError:
        return False
    return True


@pytest.mark.parametrize(
    "percent,error,level",
    [(10, False, "ok"), (70, False, "warning"), (95, False, "error"), (10, True, "error")],
)
def test_gauge_level(percent, error, level):
    assert get_gauge_level(percent, error) == level
