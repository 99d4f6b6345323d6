import hashlib

from decentraid.services.ipfs import ContentAddresser, canonical_bytes


def test_handle_shape():
    handle = ContentAddresser().address_of(b"abc")
    assert handle == "Qm" + hashlib.sha256(b"abc").hexdigest()[:44]
    assert len(handle) == 46


def test_deterministic():
    addresser = ContentAddresser()
    blob = "00112233:aabbccdd"
    assert addresser.address_of(blob) == addresser.address_of(blob)
    assert addresser.address_of(blob) == addresser.address_of(blob.encode("utf-8"))


def test_distinct_inputs_distinct_handles():
    addresser = ContentAddresser()
    handles = {addresser.address_of(f"blob-{i}") for i in range(200)}
    assert len(handles) == 200


def test_objects_are_canonicalized():
    addresser = ContentAddresser()
    first = {"name": "Ada", "email": "ada@x.com", "nested": {"b": 1, "a": 2}}
    second = {"nested": {"a": 2, "b": 1}, "email": "ada@x.com", "name": "Ada"}
    assert addresser.address_of(first) == addresser.address_of(second)
    assert canonical_bytes(first) == b'{"email":"ada@x.com","name":"Ada","nested":{"a":2,"b":1}}'


def test_configurable_prefix_and_length():
    handle = ContentAddresser(prefix="bafy", length=10).address_of(b"abc")
    assert handle == "bafy" + hashlib.sha256(b"abc").hexdigest()[:10]
