import json
from array import array

import pytest

from common.models import PresenceMask
from telemetry_decoder import (
    FieldCatalog,
    FieldDescriptor,
    WireType,
    calculate_sensor_data_size,
    decode_metadata,
    decode_payload,
    decode_payload_raw,
    decode_payload_to_json,
    decode_reading,
    decode_sensor_data,
    get_default_catalog,
    read_presence_mask,
)
from telemetry_decoder.errors import (
    EmptyPresenceMaskError,
    InternalSizeMismatchError,
    InvalidPayloadLengthError,
    MalformedHeaderError,
    PayloadDecodeError,
    TruncatedReadingDataError,
    TruncatedSharedMaskError,
    UnknownSensorFlagError,
    UnsupportedVersionError,
)

from tests.helpers import META_PER_READING, META_SHARED, mask64_le, mask_for_bits, pack_fields


@pytest.fixture
def catalog():
    return get_default_catalog()


@pytest.fixture
def all_fields_raw(catalog):
    """One raw value per catalog field, chosen to be exact in every wire type."""
    values = {}
    for descriptor in catalog:
        if descriptor.wire_type is WireType.INT8:
            values[descriptor.name] = -75
        elif descriptor.wire_type is WireType.INT16:
            values[descriptor.name] = -1234
        elif descriptor.wire_type is WireType.UINT32:
            values[descriptor.name] = 1_234_567 + descriptor.ordinal
        else:
            values[descriptor.name] = 1000 + descriptor.ordinal
    return values


# --- Worked examples ---


def test_shared_mask_single_reading(shared_temp_co2_payload):
    decoded = decode_payload(shared_temp_co2_payload)

    assert decoded.header.version == 0
    assert decoded.header.shared_presence_mask is True
    assert decoded.header.interval_minutes == 5
    assert decoded.reading_count == 1
    assert decoded.readings[0].fields == {"temperature": 25.0, "co2": 400.0}


def test_shared_mask_batch_of_three():
    payload = bytes(
        [META_SHARED, 0x05, *mask64_le(0x04), 0x90, 0x01, 0x9A, 0x01, 0xA4, 0x01]
    )
    decoded = decode_payload(payload)

    assert decoded.reading_count == 3
    assert [r["co2"] for r in decoded.readings] == [400, 410, 420]
    assert all(r.presence_mask == PresenceMask(lo=0x04) for r in decoded.readings)


def test_per_reading_masks(per_reading_payload):
    decoded = decode_payload(per_reading_payload)

    assert decoded.header.shared_presence_mask is False
    assert decoded.reading_count == 2
    assert decoded.readings[0].fields == {"temperature": 25.0}
    assert decoded.readings[1].fields == {"co2": 400.0}
    assert decoded.readings[0].presence_mask.lo == 0x01
    assert decoded.readings[1].presence_mask.lo == 0x04


def test_pm25_channels_are_scaled_by_ten():
    payload = bytes([META_SHARED, 0x05, *mask64_le(0x300), 0x7D, 0x00, 0x87, 0x00])
    reading = decode_payload(payload).readings[0]

    assert reading["pm25_ch1"] == pytest.approx(12.5)
    assert reading["pm25_ch2"] == pytest.approx(13.5)


def test_signal_is_sign_extended():
    payload = bytes([META_SHARED, 0x05, *mask64_le(0x20000000), 0xB5])
    reading = decode_payload(payload).readings[0]

    assert reading["signal"] == -75


def test_ozone_working_electrode_is_uint32_scaled_by_thousand(catalog):
    payload = bytes(
        [META_SHARED, 0x0F, *mask_for_bits(24), *pack_fields(catalog, {"o3_we": 3_000_123_456})]
    )
    decoded = decode_payload(payload)

    assert decoded.header.interval_minutes == 15
    assert decoded.readings[0]["o3_we"] == pytest.approx(3_000_123.456)
    assert decode_payload_raw(payload).readings[0]["o3_we"] == 3_000_123_456


def test_negative_temperature():
    payload = bytes([META_SHARED, 0x01, *mask64_le(0x01), 0x0C, 0xFE])  # -500
    assert decode_payload(payload).readings[0]["temperature"] == pytest.approx(-5.0)


# --- Metadata ---


@pytest.mark.parametrize(
    "metadata, expected",
    [
        (0x00, (0, False)),
        (0x20, (0, True)),
        (0x1F, (31, False)),
        (0x3F, (31, True)),
        (0xC0, (0, False)),
        (0xE0, (0, True)),
    ],
)
def test_decode_metadata(metadata, expected):
    assert decode_metadata(metadata) == expected


def test_reserved_bits_are_ignored(shared_temp_co2_payload):
    with_reserved = bytes([shared_temp_co2_payload[0] | 0xC0]) + shared_temp_co2_payload[1:]
    assert decode_payload(with_reserved) == decode_payload(shared_temp_co2_payload)


# --- Presence masks and sizing ---


def test_read_presence_mask_low_word_first():
    buffer = bytes([0xAA, *mask64_le(0x12345678, 0x9ABCDEF0)])
    mask = read_presence_mask(buffer, 1)

    assert mask.lo == 0x12345678
    assert mask.hi == 0x9ABCDEF0
    assert mask.to_bytes() == buffer[1:]


def test_read_presence_mask_truncated():
    with pytest.raises(TruncatedReadingDataError) as exc_info:
        read_presence_mask(b"\x01\x02\x03", 0)
    assert exc_info.value.expected == 8
    assert exc_info.value.actual == 3


def test_calculate_sensor_data_size_sums_wire_widths(catalog):
    assert calculate_sensor_data_size(PresenceMask(), catalog) == 0
    assert calculate_sensor_data_size(PresenceMask.from_bits(0, 2), catalog) == 4
    assert calculate_sensor_data_size(PresenceMask.from_bits(24, 29), catalog) == 5
    every_field = PresenceMask.from_bits(*(d.ordinal for d in catalog))
    assert calculate_sensor_data_size(every_field, catalog) == 67


def test_size_agrees_with_bytes_consumed(catalog, all_fields_raw):
    mask = PresenceMask.from_bits(*(d.ordinal for d in catalog))
    data = pack_fields(catalog, all_fields_raw)

    fields, consumed = decode_sensor_data(data, 0, mask, catalog=catalog)

    assert consumed == calculate_sensor_data_size(mask, catalog) == len(data)
    assert len(fields) == len(catalog)


def test_decode_reading_at_offset(catalog):
    buffer = b"\xff\xff" + bytes(mask_for_bits(1)) + pack_fields(catalog, {"humidity": 4550})
    reading, consumed = decode_reading(buffer, 2, catalog=catalog)

    assert consumed == 10
    assert reading["humidity"] == pytest.approx(45.5)


# --- Ordering and scaling properties ---


@pytest.mark.parametrize(
    "bits",
    [(0, 2), (29, 0, 2), (8, 9, 22, 23), (28, 1, 24, 27), tuple(range(30))],
)
def test_fields_come_out_in_ascending_ordinal_order(catalog, all_fields_raw, bits):
    names = [catalog.descriptor_for(b).name for b in bits]
    payload = bytes(
        [META_SHARED, 0x05, *mask_for_bits(*bits)]
        + list(pack_fields(catalog, {n: all_fields_raw[n] for n in names}))
    )
    reading = decode_payload(payload).readings[0]

    expected_order = [catalog.descriptor_for(b).name for b in sorted(bits)]
    assert list(reading.fields) == expected_order


def test_raw_values_times_scale_match_scaled(catalog, all_fields_raw):
    data = pack_fields(catalog, all_fields_raw)
    payload = bytes([META_SHARED, 0x05, *mask_for_bits(*range(30))]) + data * 2

    raw = decode_payload_raw(payload)
    scaled = decode_payload(payload)

    assert raw.reading_count == scaled.reading_count == 2
    for raw_reading, scaled_reading in zip(raw.readings, scaled.readings):
        for name, raw_value in raw_reading.fields.items():
            assert isinstance(raw_value, int)
            assert isinstance(scaled_reading[name], float)
            scale = catalog.by_name(name).scale
            assert scaled_reading[name] * scale == pytest.approx(raw_value)
            assert raw_value == all_fields_raw[name]


def test_shared_mask_reading_count_matches_length(catalog):
    mask = PresenceMask.from_bits(0, 1, 29)
    reading_size = calculate_sensor_data_size(mask, catalog)
    for count in range(4):
        payload = bytes([META_SHARED, 0x05]) + mask.to_bytes() + b"\x00" * (reading_size * count)
        decoded = decode_payload(payload)
        assert decoded.reading_count * reading_size == len(payload) - 10
        assert decoded.reading_count == count


def test_decoding_is_idempotent(per_reading_payload):
    first = decode_payload(per_reading_payload)
    second = decode_payload(per_reading_payload)

    assert first == second
    assert first.model_dump() == second.model_dump()


def test_accepts_bytearray_and_memoryview(shared_temp_co2_payload):
    expected = decode_payload(shared_temp_co2_payload)
    assert decode_payload(bytearray(shared_temp_co2_payload)) == expected
    assert decode_payload(memoryview(shared_temp_co2_payload)) == expected


def test_memoryview_with_wide_items_is_read_as_bytes(shared_temp_co2_payload):
    words = array("H")
    words.frombytes(shared_temp_co2_payload)
    view = memoryview(words)
    assert len(view) == len(shared_temp_co2_payload) // 2

    assert decode_payload(view) == decode_payload(shared_temp_co2_payload)


def test_rejects_text_input():
    with pytest.raises(TypeError):
        decode_payload("2005")


def test_shared_mask_without_data_has_no_readings():
    decoded = decode_payload(bytes([META_SHARED, 0x05, *mask64_le(0x04)]))
    assert decoded.reading_count == 0
    assert decoded.readings == ()


def test_per_reading_header_only_has_no_readings():
    decoded = decode_payload(bytes([META_PER_READING, 0x3C]))
    assert decoded.reading_count == 0
    assert decoded.header.interval_minutes == 60


# --- Errors ---


@pytest.mark.parametrize("payload", [b"", b"\x20"])
def test_malformed_header(payload):
    with pytest.raises(MalformedHeaderError) as exc_info:
        decode_payload(payload)
    err = exc_info.value
    assert err.kind == "MalformedHeader"
    assert err.offset == 0
    assert err.expected == 2
    assert err.actual == len(payload)


@pytest.mark.parametrize("metadata", [0x01, 0x21, 0x1F, 0xFF])
def test_unsupported_version(metadata):
    with pytest.raises(UnsupportedVersionError) as exc_info:
        decode_payload(bytes([metadata, 0x05, *mask64_le(0x04), 0x90, 0x01]))
    assert exc_info.value.actual == metadata & 0x1F
    assert exc_info.value.expected == 0


def test_truncated_shared_mask():
    with pytest.raises(TruncatedSharedMaskError) as exc_info:
        decode_payload(bytes([META_SHARED, 0x05, 0x04, 0x00, 0x00]))
    err = exc_info.value
    assert err.offset == 2
    assert err.expected == 10
    assert err.actual == 5


def test_empty_shared_mask():
    with pytest.raises(EmptyPresenceMaskError) as exc_info:
        decode_payload(bytes([META_SHARED, 0x05, *mask64_le(0), 0x00, 0x00]))
    assert exc_info.value.kind == "EmptyPresenceMask"


def test_invalid_payload_length():
    with pytest.raises(InvalidPayloadLengthError) as exc_info:
        decode_payload(bytes([META_SHARED, 0x05, *mask64_le(0x05), 0xC4, 0x09, 0x90]))
    err = exc_info.value
    assert err.offset == 10
    assert err.expected == 4
    assert err.actual == 3


@pytest.mark.parametrize("bit", [30, 31, 32, 47, 63])
def test_unknown_sensor_flag_in_shared_mask(bit):
    payload = bytes([META_SHARED, 0x05, *mask_for_bits(0, bit), 0x00, 0x00, 0x00, 0x00])
    with pytest.raises(UnknownSensorFlagError) as exc_info:
        decode_payload(payload)
    assert exc_info.value.flag == bit
    assert exc_info.value.actual == bit


def test_unknown_sensor_flag_in_per_reading_mask():
    payload = bytes([META_PER_READING, 0x05, *mask_for_bits(2, 40), 0x90, 0x01, 0x00])
    with pytest.raises(UnknownSensorFlagError) as exc_info:
        decode_payload(payload)
    assert exc_info.value.flag == 40
    assert exc_info.value.offset == 12


def test_truncated_reading_fields():
    payload = bytes([META_PER_READING, 0x05, *mask64_le(0x01), 0xC4])
    with pytest.raises(TruncatedReadingDataError) as exc_info:
        decode_payload(payload)
    err = exc_info.value
    assert err.offset == 10
    assert err.expected == 2
    assert err.actual == 1


def test_truncated_second_reading_mask(per_reading_payload):
    with pytest.raises(TruncatedReadingDataError) as exc_info:
        decode_payload(per_reading_payload + b"\x01\x00\x00")
    err = exc_info.value
    assert err.offset == len(per_reading_payload)
    assert err.expected == 8
    assert err.actual == 3


def test_internal_size_mismatch(mocker):
    mocker.patch("telemetry_decoder.decode.calculate_sensor_data_size", return_value=4)
    payload = bytes([META_SHARED, 0x05, *mask64_le(0x01), 0xC4, 0x09, 0x00, 0x00])

    with pytest.raises(InternalSizeMismatchError) as exc_info:
        decode_payload(payload)
    err = exc_info.value
    assert err.expected == 4
    assert err.actual == 2


def test_decode_errors_share_base_class_and_serialize():
    with pytest.raises(PayloadDecodeError) as exc_info:
        decode_payload(b"\x20")
    assert isinstance(exc_info.value, ValueError)
    assert exc_info.value.to_dict() == {
        "error": "MalformedHeader",
        "detail": str(exc_info.value),
        "offset": 0,
        "expected": 2,
        "actual": 1,
    }


# --- Custom catalogs ---


@pytest.fixture
def sparse_catalog():
    return FieldCatalog(
        [
            FieldDescriptor(0, "pressure", WireType.UINT32, 100, "hPa"),
            FieldDescriptor(3, "tilt", WireType.INT16, 10, "deg"),
            FieldDescriptor(40, "uptime", WireType.UINT16, 1, "min"),
        ]
    )


def test_custom_catalog_with_high_ordinal(sparse_catalog):
    data = pack_fields(sparse_catalog, {"pressure": 101325, "tilt": -125, "uptime": 720})
    payload = bytes([META_SHARED, 0x05, *mask_for_bits(0, 3, 40)]) + data

    reading = decode_payload(payload, catalog=sparse_catalog).readings[0]

    assert list(reading.fields) == ["pressure", "tilt", "uptime"]
    assert reading["pressure"] == pytest.approx(1013.25)
    assert reading["tilt"] == pytest.approx(-12.5)
    assert reading["uptime"] == 720
    assert reading.presence_mask.hi == 1 << 8


def test_custom_catalog_gap_is_unknown(sparse_catalog):
    payload = bytes([META_SHARED, 0x05, *mask_for_bits(1), 0x00, 0x00])
    with pytest.raises(UnknownSensorFlagError) as exc_info:
        decode_payload(payload, catalog=sparse_catalog)
    assert exc_info.value.flag == 1


# --- JSON rendering ---


def test_decode_payload_to_json(shared_temp_co2_payload):
    rendered = json.loads(decode_payload_to_json(shared_temp_co2_payload))

    assert rendered == {
        "header": {"version": 0, "sharedPresenceMask": True, "intervalMinutes": 5},
        "readings": [
            {
                "presenceMask": {"lo": 5, "hi": 0},
                "fields": {"temperature": 25.0, "co2": 400.0},
            }
        ],
        "readingCount": 1,
    }


def test_decode_payload_to_json_pretty_raw(per_reading_payload):
    text = decode_payload_to_json(per_reading_payload, pretty=True, apply_scaling=False)

    assert "\n" in text
    rendered = json.loads(text)
    assert rendered["readings"][0]["fields"] == {"temperature": 2500}
    assert rendered["readings"][1]["fields"] == {"co2": 400}


def test_decode_payload_to_json_propagates_errors():
    with pytest.raises(EmptyPresenceMaskError):
        decode_payload_to_json(bytes([META_SHARED, 0x05, *mask64_le(0)]))
