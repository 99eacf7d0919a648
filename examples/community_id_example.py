#!/usr/bin/env python3
"""
Example: Community ID Calculation

This example shows how to compute Community IDs for flows and use them to
join records observed from opposite ends of a conversation.
"""

from collections import defaultdict

from communityid import Flow, FlowSide, Protocol, Settings


def example_basic_usage():
    """Basic Community ID calculation."""
    print("=" * 80)
    print("Example 1: Basic Community ID Calculation")
    print("=" * 80)

    flow = Flow.new(Protocol.UDP, "192.168.1.42", 4242, "8.8.8.8", 53)
    cid = flow.community_id_v1(0)

    print(f"Flow:   {flow}")
    print(f"Base64: {cid.base64()}")
    print(f"Hex:    {cid.hexdigest()}")
    print()


def example_bidirectional_consistency():
    """Both directions of a conversation share one identifier."""
    print("=" * 80)
    print("Example 2: Bidirectional Consistency")
    print("=" * 80)

    forward = Flow.new(Protocol.TCP, "192.168.1.100", 54321, "10.0.0.1", 80)
    reverse = forward.reversed()

    for flow in (forward, reverse):
        side = flow.canonical().side
        print(f"{flow}")
        print(f"  ID: {flow.community_id_v1()}, Side: {side.name}")
    print()
    print(f"IDs match: {forward.community_id_v1() == reverse.community_id_v1()}")
    print()


def example_icmp():
    """ICMP requests and replies correlate; other ICMP types are one-way."""
    print("=" * 80)
    print("Example 3: ICMP")
    print("=" * 80)

    request = Flow.new(Protocol.ICMP, "192.168.0.89", 8, "192.168.0.1", 0)
    reply = Flow.new(Protocol.ICMP, "192.168.0.1", 0, "192.168.0.89", 0)
    unreachable = Flow.new(Protocol.ICMP, "192.168.0.1", 3, "192.168.0.89", 1)

    print(f"Echo request: {request.community_id_v1()}")
    print(f"Echo reply:   {reply.community_id_v1()}")
    side = unreachable.canonical().side
    print(f"Unreachable:  {unreachable.community_id_v1()} ({'one-way' if side == FlowSide.ONE_WAY else side.name})")
    print()


def example_record_join():
    """Join flow records from two sensors on their Community ID."""
    print("=" * 80)
    print("Example 4: Joining Records From Two Sensors")
    print("=" * 80)

    settings = Settings(seed=0, encoding="hex")

    sensor_a = [
        ("TCP", "192.168.1.100", 54321, "10.0.0.1", 80),
        ("UDP", "192.168.1.100", 5353, "224.0.0.251", 5353),
    ]
    sensor_b = [
        ("TCP", "10.0.0.1", 80, "192.168.1.100", 54321),
        ("TCP", "10.0.0.2", 22, "192.168.1.101", 50000),
    ]

    groups = defaultdict(list)
    for sensor, records in (("A", sensor_a), ("B", sensor_b)):
        for proto, src, sport, dst, dport in records:
            flow = Flow.new(Protocol[proto], src, sport, dst, dport)
            groups[settings.render(settings.compute(flow))].append(f"{sensor}: {flow}")

    for cid, seen in groups.items():
        status = "joined" if len(seen) > 1 else "single"
        print(f"{cid} [{status}]")
        for line in seen:
            print(f"  {line}")
    print()


if __name__ == "__main__":
    example_basic_usage()
    example_bidirectional_consistency()
    example_icmp()
    example_record_join()
