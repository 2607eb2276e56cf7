from starlette.requests import Request

from iam_core.api.utils.client_info import client_ip, rate_limit_ip


def make_request(peer="203.0.113.7", forwarded=None) -> Request:
    headers = []
    if forwarded is not None:
        headers.append((b"x-forwarded-for", forwarded.encode()))
    return Request(
        {"type": "http", "method": "GET", "path": "/", "headers": headers, "client": (peer, 5000)}
    )


def test_rate_limit_ip_ignores_forwarded_header_from_untrusted_peer():
    request = make_request(forwarded="10.0.0.1")

    assert rate_limit_ip(request, trusted_proxies=[]) == "203.0.113.7"
    assert client_ip(request) == "10.0.0.1"


def test_rate_limit_ip_uses_nearest_untrusted_hop_behind_proxy():
    request = make_request(peer="10.1.0.1", forwarded="6.6.6.6, 198.51.100.2, 10.1.0.2")

    assert rate_limit_ip(request, trusted_proxies=["10.1.0.1", "10.1.0.2"]) == "198.51.100.2"


def test_rate_limit_ip_falls_back_to_peer_when_chain_is_all_proxies():
    request = make_request(peer="10.1.0.1", forwarded="10.1.0.2")

    assert rate_limit_ip(request, trusted_proxies="10.1.0.1,10.1.0.2") == "10.1.0.1"


def test_rate_limit_ip_without_forwarded_header():
    assert rate_limit_ip(make_request(peer="10.1.0.1"), trusted_proxies=["10.1.0.1"]) == "10.1.0.1"
