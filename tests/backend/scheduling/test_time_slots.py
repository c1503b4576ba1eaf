import pytest

from backend.scheduling.time_slots import (
    SlotParseError,
    decode_time_slot,
    format_time_slot,
    normalize_time_slot,
)


@pytest.mark.parametrize(
    ('time_slot', 'expected'),
    [
        ('01:30 PM', (13, 30)),
        ('12:00 AM', (0, 0)),
        ('12:00 PM', (12, 0)),
        ('09:05 AM', (9, 5)),
        ('9:05 AM', (9, 5)),
        ('11:59 PM', (23, 59)),
        ('12:30 AM', (0, 30)),
    ],
)
def test_decode_time_slot_converts_to_24_hour_clock(time_slot: str, expected: tuple[int, int]) -> None:
    assert decode_time_slot(time_slot) == expected


def test_decoded_slots_reencode_to_the_same_clock_value() -> None:
    for hour in range(1, 13):
        for minute in range(60):
            for marker in ('AM', 'PM'):
                decoded = decode_time_slot(f'{hour}:{minute:02d} {marker}')

                assert 0 <= decoded[0] <= 23
                assert decode_time_slot(format_time_slot(*decoded)) == decoded


@pytest.mark.parametrize(
    'time_slot',
    [
        '0130 PM',
        '01:30PM',
        '01:30  PM',
        '01:30 pm',
        '01:30 XM',
        'ab:cd AM',
        '1:2:3 AM',
        '1:5 PM',
        '1:005 PM',
        '001:30 PM',
        '13:00 PM',
        '0:15 AM',
        '10:60 AM',
        '',
        ' 01:30 PM',
    ],
)
def test_decode_time_slot_rejects_malformed_labels(time_slot: str) -> None:
    with pytest.raises(SlotParseError) as exception_info:
        decode_time_slot(time_slot)

    assert exception_info.value.time_slot == time_slot


def test_decode_time_slot_rejects_non_string_values() -> None:
    with pytest.raises(SlotParseError):
        decode_time_slot(None)


@pytest.mark.parametrize(
    ('hour', 'minute', 'expected'),
    [
        (0, 0, '12:00 AM'),
        (9, 5, '09:05 AM'),
        (12, 0, '12:00 PM'),
        (13, 30, '01:30 PM'),
        (23, 59, '11:59 PM'),
    ],
)
def test_format_time_slot_renders_zero_padded_labels(hour: int, minute: int, expected: str) -> None:
    assert format_time_slot(hour, minute) == expected


def test_format_time_slot_rejects_out_of_range_values() -> None:
    with pytest.raises(ValueError):
        format_time_slot(24, 0)


def test_normalize_time_slot_pads_hour_and_strips_whitespace() -> None:
    assert normalize_time_slot(' 9:15 AM ') == '09:15 AM'
