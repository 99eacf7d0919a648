"""Tests for canonical endpoint ordering."""

from ipaddress import ip_address

import pytest

from communityid.ordering import (
    ICMP6_COUNTERPARTS,
    ICMP_COUNTERPARTS,
    FlowSide,
    Icmp6Type,
    IcmpType,
    canonicalize,
    order_endpoints,
    port_equivalents,
)


class TestOrderEndpoints:
    """Test the default (address, port) ordering rule."""

    def test_smaller_address_first(self):
        result = order_endpoints(ip_address("192.168.1.42"), 4242, ip_address("8.8.8.8"), 53)

        assert result.first_address == ip_address("8.8.8.8")
        assert result.first_port == 53
        assert result.second_address == ip_address("192.168.1.42")
        assert result.second_port == 4242
        assert result.side == FlowSide.SWAPPED

    def test_already_ordered(self):
        result = order_endpoints(ip_address("8.8.8.8"), 53, ip_address("192.168.1.42"), 4242)

        assert result.first_address == ip_address("8.8.8.8")
        assert result.side == FlowSide.ORIGINAL

    def test_same_address_uses_port(self):
        """When addresses are equal the lower port goes first."""
        result = order_endpoints(ip_address("192.168.1.42"), 42, ip_address("192.168.1.42"), 41)

        assert (result.first_port, result.second_port) == (41, 42)
        assert result.side == FlowSide.SWAPPED

    def test_address_compared_before_port(self):
        """A lower address wins even with a higher port."""
        result = order_endpoints(ip_address("10.0.0.2"), 1, ip_address("10.0.0.1"), 65535)

        assert result.first_address == ip_address("10.0.0.1")
        assert result.first_port == 65535

    def test_address_bytes_not_text(self):
        """9.0.0.1 sorts before 10.0.0.1 although "10" < "9" as text."""
        result = order_endpoints(ip_address("10.0.0.1"), 80, ip_address("9.0.0.1"), 80)

        assert result.first_address == ip_address("9.0.0.1")

    def test_reflexive_flow_not_swapped(self):
        result = order_endpoints(ip_address("10.0.0.1"), 80, ip_address("10.0.0.1"), 80)

        assert result.side == FlowSide.ORIGINAL

    def test_one_way_never_swapped(self):
        result = order_endpoints(
            ip_address("192.168.0.89"), 20, ip_address("192.168.0.1"), 0, one_way=True
        )

        assert result.first_address == ip_address("192.168.0.89")
        assert result.side == FlowSide.ONE_WAY

    def test_portless_orders_by_address(self):
        result = order_endpoints(ip_address("10.0.0.2"), None, ip_address("10.0.0.1"), None)

        assert result.first_address == ip_address("10.0.0.1")
        assert result.first_port is None
        assert result.side == FlowSide.SWAPPED

    def test_ipv6_ordering(self):
        result = order_endpoints(ip_address("2001:db8::2"), 80, ip_address("2001:db8::1"), 12345)

        assert result.first_address == ip_address("2001:db8::1")
        assert result.first_port == 12345


class TestPortEquivalents:
    """Test ICMP type/code mapping."""

    @pytest.mark.parametrize(
        "request_type,reply_type",
        [
            (IcmpType.ECHO, IcmpType.ECHO_REPLY),
            (IcmpType.TIMESTAMP, IcmpType.TIMESTAMP_REPLY),
            (IcmpType.INFO, IcmpType.INFO_REPLY),
            (IcmpType.ROUTER_SOLICIT, IcmpType.ROUTER_ADVERT),
            (IcmpType.MASK, IcmpType.MASK_REPLY),
        ],
    )
    def test_icmp_pairs_are_symmetric(self, request_type, reply_type):
        assert ICMP_COUNTERPARTS[request_type] == reply_type
        assert ICMP_COUNTERPARTS[reply_type] == request_type

    @pytest.mark.parametrize(
        "request_type,reply_type",
        [
            (Icmp6Type.ECHO_REQUEST, Icmp6Type.ECHO_REPLY),
            (Icmp6Type.MLD_LISTENER_QUERY, Icmp6Type.MLD_LISTENER_REPORT),
            (Icmp6Type.ND_ROUTER_SOLICIT, Icmp6Type.ND_ROUTER_ADVERT),
            (Icmp6Type.ND_NEIGHBOR_SOLICIT, Icmp6Type.ND_NEIGHBOR_ADVERT),
            (Icmp6Type.WRU_REQUEST, Icmp6Type.WRU_REPLY),
            (Icmp6Type.HAAD_REQUEST, Icmp6Type.HAAD_REPLY),
        ],
    )
    def test_icmp6_pairs_are_symmetric(self, request_type, reply_type):
        assert ICMP6_COUNTERPARTS[request_type] == reply_type
        assert ICMP6_COUNTERPARTS[reply_type] == request_type

    def test_table_sizes(self):
        assert len(ICMP_COUNTERPARTS) == 10
        assert len(ICMP6_COUNTERPARTS) == 12

    def test_echo_request_code_replaced(self):
        """The ICMP code is discarded for known types."""
        assert port_equivalents(1, 8, 5) == (8, 0, False)

    def test_echo_reply(self):
        assert port_equivalents(1, 0, 0) == (0, 8, False)

    def test_unknown_icmp_type_is_one_way(self):
        # 3 = destination unreachable
        assert port_equivalents(1, 3, 1) == (3, 1, True)

    def test_icmp4_table_not_used_for_icmp6(self):
        assert port_equivalents(58, 8, 0) == (8, 0, True)

    def test_icmp6_neighbor_solicit(self):
        assert port_equivalents(58, 135, 0) == (135, 136, False)

    def test_other_protocols_untouched(self):
        assert port_equivalents(6, 8, 0) == (8, 0, False)
        assert port_equivalents(17, 3, 1) == (3, 1, False)


class TestCanonicalize:
    """Test the full canonicalization step."""

    def test_reverse_flows_share_endpoints(self):
        forward = canonicalize(17, ip_address("192.168.1.42"), 4242, ip_address("8.8.8.8"), 53)
        reverse = canonicalize(17, ip_address("8.8.8.8"), 53, ip_address("192.168.1.42"), 4242)

        assert forward[:4] == reverse[:4]
        assert {forward.side, reverse.side} == {FlowSide.ORIGINAL, FlowSide.SWAPPED}

    def test_echo_request_and_reply_align(self):
        request = canonicalize(1, ip_address("192.168.0.89"), 8, ip_address("192.168.0.1"), 0)
        reply = canonicalize(1, ip_address("192.168.0.1"), 0, ip_address("192.168.0.89"), 0)

        assert request[:4] == reply[:4]
        assert request.first_address == ip_address("192.168.0.1")
        assert (request.first_port, request.second_port) == (0, 8)

    def test_neighbor_solicit_and_advert_align(self):
        solicit = canonicalize(
            58, ip_address("fe80::200:86ff:fe05:80da"), 135, ip_address("fe80::260:97ff:fe07:69ea"), 0
        )
        advert = canonicalize(
            58, ip_address("fe80::260:97ff:fe07:69ea"), 136, ip_address("fe80::200:86ff:fe05:80da"), 0
        )

        assert solicit[:4] == advert[:4]

    def test_unknown_icmp_type_keeps_direction(self):
        result = canonicalize(1, ip_address("192.168.0.89"), 20, ip_address("192.168.0.1"), 0)

        assert result.first_address == ip_address("192.168.0.89")
        assert (result.first_port, result.second_port) == (20, 0)
        assert result.side == FlowSide.ONE_WAY

    def test_portless_icmp_has_no_equivalents(self):
        result = canonicalize(1, ip_address("10.0.0.2"), None, ip_address("10.0.0.1"), None)

        assert result.first_port is None
        assert result.side == FlowSide.SWAPPED

    def test_unknown_protocol_uses_default_rule(self):
        result = canonicalize(200, ip_address("10.0.0.2"), 5, ip_address("10.0.0.1"), 7)

        assert result.first_address == ip_address("10.0.0.1")
        assert result.side == FlowSide.SWAPPED
