"""Tests for CID sharding strategies."""

import pytest
from multiformats import CID, multibase, multihash

from azure_blockstore.errors import ConfigurationError, DecodeError
from azure_blockstore.identifiers import cid_for, parse_cid
from azure_blockstore.sharding import Flat, NextToLast, ShardingStrategy, get_sharding_strategy


def sample_cids():
    """CIDs covering v0, v1 and several codecs."""
    digest = multihash.digest(b"hello world", "sha2-256")
    return [
        cid_for(b""),
        cid_for(b"hello world"),
        cid_for(b"hello world", codec="dag-cbor"),
        cid_for(b"x" * 1000, codec="dag-pb"),
        CID("base58btc", 0, "dag-pb", digest),
    ]


class TestNextToLast:
    """Test the default sharding strategy."""

    @pytest.mark.parametrize("cid", sample_cids())
    def test_round_trip(self, cid):
        """decode(encode(cid)) returns the original CID."""
        strategy = NextToLast()
        assert strategy.decode(strategy.encode(cid)) == cid

    def test_path_shape(self):
        """Path is <next-to-last chars>/<encoded cid>.data."""
        path = NextToLast().encode(cid_for(b"hello world"))

        shard, filename = path.split("/")
        assert filename.endswith(".data")
        encoded = filename[: -len(".data")]
        assert encoded.startswith("B")  # base32upper multibase prefix
        assert encoded == encoded.upper()
        assert shard == encoded[-3:-1]

    def test_encoding_is_deterministic(self):
        """Same CID always maps to the same path."""
        strategy = NextToLast()
        cid = cid_for(b"same content")
        assert strategy.encode(cid) == strategy.encode(cid_for(b"same content"))
        assert NextToLast().encode(cid) == strategy.encode(cid)

    def test_distinct_cids_get_distinct_paths(self):
        """Different CIDs never collide."""
        strategy = NextToLast()
        paths = {strategy.encode(cid) for cid in sample_cids()}
        assert len(paths) == len(sample_cids())

    def test_same_digest_different_codec(self):
        """Codec is part of the path, not just the multihash."""
        strategy = NextToLast()
        raw = cid_for(b"data", codec="raw")
        cbor = cid_for(b"data", codec="dag-cbor")
        assert strategy.encode(raw) != strategy.encode(cbor)
        assert strategy.decode(strategy.encode(cbor)) == cbor

    def test_custom_prefix_length_and_extension(self):
        """Options change the layout but keep the round trip."""
        strategy = NextToLast(prefix_length=3, extension="")
        cid = cid_for(b"custom")
        path = strategy.encode(cid)

        shard, filename = path.split("/")
        assert len(shard) == 3
        assert shard == filename[-4:-1]
        assert strategy.decode(path) == cid

    @pytest.mark.parametrize(
        "path",
        [
            "readme.txt",
            "a/b/c.data",
            "",
            "XY/",
        ],
    )
    def test_decode_rejects_foreign_names(self, path):
        """Names this strategy never writes fail with DecodeError."""
        with pytest.raises(DecodeError):
            NextToLast().decode(path)

    def test_decode_rejects_missing_extension(self):
        """Extension is required."""
        strategy = NextToLast()
        path = strategy.encode(cid_for(b"x"))
        with pytest.raises(DecodeError, match="extension"):
            strategy.decode(path[: -len(".data")])

    def test_decode_rejects_wrong_shard(self):
        """Shard directory must match the CID it holds."""
        strategy = NextToLast()
        shard, filename = strategy.encode(cid_for(b"x")).split("/")
        wrong = "AA" if shard != "AA" else "BB"
        with pytest.raises(DecodeError, match="Shard"):
            strategy.decode(f"{wrong}/{filename}")

    def test_decode_rejects_invalid_cid(self):
        """Well-shaped names that do not hold a CID fail."""
        encoded = "BNOTACID"
        with pytest.raises(DecodeError):
            NextToLast().decode(f"{encoded[-3:-1]}/{encoded}.data")

    def test_decode_rejects_lower_case_name(self):
        """Only the exact name encode() writes is accepted."""
        strategy = NextToLast()
        path = strategy.encode(cid_for(b"x"))
        with pytest.raises(DecodeError):
            strategy.decode(path.lower())

    def test_decode_error_is_value_error(self):
        """DecodeError can be handled as a ValueError."""
        with pytest.raises(ValueError):
            NextToLast().decode("nonsense")

    def test_invalid_options(self):
        """Bad options fail at construction."""
        with pytest.raises(ConfigurationError):
            NextToLast(prefix_length=0)
        with pytest.raises(ConfigurationError):
            NextToLast(extension="/data")

    def test_satisfies_protocol(self):
        assert isinstance(NextToLast(), ShardingStrategy)


class TestFlat:
    """Test the identity sharding strategy."""

    @pytest.mark.parametrize("cid", sample_cids())
    def test_round_trip(self, cid):
        strategy = Flat()
        assert strategy.decode(strategy.encode(cid)) == cid

    def test_path_is_cid_string(self):
        cid = cid_for(b"flat")
        assert Flat().encode(cid) == str(cid)

    def test_encoding_ignores_parsed_base(self):
        cid = cid_for(b"flat")
        other_base = parse_cid(multibase.encode(bytes(cid), "base58btc"))
        assert Flat().encode(other_base) == Flat().encode(cid) == str(cid)

    def test_decode_rejects_non_canonical_base(self):
        cid = cid_for(b"flat")
        with pytest.raises(DecodeError, match="canonical"):
            Flat().decode(multibase.encode(bytes(cid), "base58btc"))

    @pytest.mark.parametrize("path", ["", "ab/cd", "not-a-cid"])
    def test_decode_rejects_foreign_names(self, path):
        with pytest.raises(DecodeError):
            Flat().decode(path)

    def test_satisfies_protocol(self):
        assert isinstance(Flat(), ShardingStrategy)


class TestGetShardingStrategy:
    """Test strategy lookup by configuration name."""

    def test_default_is_next_to_last(self):
        assert isinstance(get_sharding_strategy(), NextToLast)

    def test_lookup_with_options(self):
        strategy = get_sharding_strategy("next-to-last", prefix_length=4)
        assert strategy.prefix_length == 4

    def test_flat(self):
        assert isinstance(get_sharding_strategy("flat"), Flat)

    def test_unknown_name(self):
        with pytest.raises(ConfigurationError, match="Unknown sharding strategy"):
            get_sharding_strategy("by-date")

    def test_unknown_option(self):
        with pytest.raises(ConfigurationError):
            get_sharding_strategy("flat", prefix_length=2)


class TestIdentifiers:
    """Test CID helpers."""

    def test_cid_for_is_content_derived(self):
        assert cid_for(b"abc") == cid_for(b"abc")
        assert cid_for(b"abc") != cid_for(b"abd")

    def test_cid_for_defaults(self):
        cid = cid_for(b"abc")
        assert cid.version == 1
        assert cid.codec.name == "raw"

    def test_parse_cid_round_trip(self):
        cid = cid_for(b"abc")
        assert parse_cid(str(cid)) == cid
        assert parse_cid(f"  {cid}\n") == cid

    def test_parse_cid_invalid(self):
        with pytest.raises(DecodeError):
            parse_cid("definitely not a cid")
