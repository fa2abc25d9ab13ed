# sshproto

Pure-Python building blocks for the SSH transport and connection layers:
wire encoding, algorithm negotiation, key exchange, session key derivation,
packet MACs and channel-open messages. It uses only the standard library.

## Modules

- `sshproto.encoding`: wire primitives `ssh_string`, `mpint`, `mpint_len`,
  `name_list` and `frame_packet`; a `Reader` with `read_string`, `read_u32`,
  `read_byte` and `read_utf8` (reading past the end raises `SshError` of kind
  `INDEX_OUT_OF_BOUNDS`); public key blobs through `Ed25519PublicKey`,
  `RsaPublicKey` and `encode_public_key`.
- `sshproto.negotiation`: `Preferred` algorithm lists (`Preferred.DEFAULT`,
  `Preferred.COMPRESSED`), `write_kex` to build a `KEXINIT` message with a
  random cookie, `read_kex` to agree on algorithms from the peer's `KEXINIT`
  for a given `Side`, returning `Names`. `select_server` and `select_client`
  apply each side's selection rule to a single name list.
- `sshproto.kex`: key exchanges `Curve25519Kex`, `DhGroupKex` and `NoneKex`,
  made by name with `make_kex`; the `Exchange` record hashed by
  `compute_exchange_hash`; `compute_keys`, which derives the key, nonce and
  MAC of each direction as a `KeyMaterial` of two `DirectionKeys`; the
  helpers `x25519` and `biguint_to_mpint`.
- `sshproto.dh`: the Diffie-Hellman groups `DH_GROUP1` and `DH_GROUP14`,
  `DiffieHellman` for one side of an agreement, and `decode_public_key`.
- `sshproto.mac`: `none`, `hmac-sha1`, `hmac-sha2-256`, `hmac-sha2-512` and
  the encrypt-then-MAC variants, looked up with `get_mac_algorithm`;
  `MacAlgorithm.make_mac` gives a `Mac` with `compute` and a constant-time
  `verify`.
- `sshproto.parsing`: `OpenChannelMessage.parse` for `CHANNEL_OPEN` bodies
  (session, x11, direct-tcpip, forwarded-tcpip, agent forwarding, or
  unknown), with `confirm`, `fail` and `unknown_type` building the framed
  replies; `ChannelOpenConfirmation.parse`.
- `sshproto.types`: `Limits` (rekey limits, at most 1 GiB each), `Disconnect`,
  `Signal`, `ChannelOpenFailure`, `ChannelId` and `ChannelParams`.
- `sshproto.pty`: the `Pty` terminal mode opcodes and `Pty.from_code`.
- `sshproto.msg`: SSH message numbers.
- `sshproto.errors`: `SshError`, carrying an `ErrorKind`, and `SendError`.

## Example

A Diffie-Hellman exchange between two in-process parties:

```python
from sshproto.kex import Exchange, make_kex

client = make_kex("diffie-hellman-group14-sha256")
server = make_kex("diffie-hellman-group14-sha256")

client_ephemeral, init_message = client.client_dh()
exchange = Exchange(client_ephemeral=client_ephemeral)
server.server_dh(exchange, init_message)
client.compute_shared_secret(exchange.server_ephemeral)

assert client.shared_secret == server.shared_secret

exchange_hash = client.compute_exchange_hash(b"", exchange)
keys = client.compute_keys(
    exchange_hash, exchange_hash, 32, 12, "hmac-sha2-256", "hmac-sha2-256", False
)
```

Negotiating algorithms:

```python
from sshproto.negotiation import Preferred, Side, read_kex, write_kex

offer = write_kex(Preferred.DEFAULT, as_server=True)
names = read_kex(offer, Preferred.DEFAULT, Side.CLIENT)
print(names.kex, names.cipher, names.client_mac)
```

## What it does not do

This package holds no network code: there is no client, server, session,
channel or event loop, and nothing opens a socket. It has no ciphers and no
compression: cipher and compression names are negotiated, and
`compute_keys` returns raw key and nonce bytes, but encrypting, decrypting
and compressing packets are left to the caller. It neither makes nor checks
host key signatures, and it reads no key files.

## Tests

```
pip install -e ".[test]"
pytest
```