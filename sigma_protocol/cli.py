"""
Command line interface for signing and verifying Sigma instances in raw transactions

    sigma hashes TX_HEX
    sigma sign TX_HEX --key WIF [--algorithm ALT --verifier PUBKEY_HEX]
    sigma remote-sign TX_HEX --host URL [--auth-type header --auth-key K --auth-value V]
    sigma verify TX_HEX [--recipient-key WIF]

Results are printed to stdout as JSON.
"""
import argparse
import json
import sys

from sigma_protocol.core import REMOTE, SigmaError, StreamError, OpCodeError, ScriptError, DataEncodingError, \
    ECDSAError, PubKeyError, SignedMessageError
from sigma_protocol.core.logging import set_log_level
from sigma_protocol.sigma import Sigma, Algorithm, AuthToken
from sigma_protocol.tx import Transaction

CLI_ERRORS = (SigmaError, StreamError, OpCodeError, ScriptError, DataEncodingError, ECDSAError, PubKeyError,
              SignedMessageError, ValueError)


def _context(args) -> Sigma:
    transaction = Transaction.from_hex(args.tx_hex)
    return Sigma(transaction, target_vout=args.vout, sigma_instance=args.instance, ref_vin=args.ref_vin)


def _hashes(args) -> int:
    sigma = _context(args)
    result = {
        "input_hash": sigma.get_input_hash().hex(),
        "data_hash": sigma.get_data_hash().hex(),
        "message_hash": sigma.get_message_hash().hex(),
        "instance_count": sigma.get_sig_instance_count(),
        "instance_position": sigma.get_sig_instance_position()
    }
    print(json.dumps(result, indent=2))
    return 0


def _sign(args) -> int:
    sigma = _context(args)
    response = sigma.sign(args.key, Algorithm(args.algorithm), args.verifier)
    print(json.dumps(response.to_dict(), indent=2))
    return 0


def _remote_sign(args) -> int:
    auth_token = None
    if args.auth_type:
        if not (args.auth_key and args.auth_value):
            raise ValueError("--auth-type needs --auth-key and --auth-value")
        auth_token = AuthToken(args.auth_type, args.auth_key, args.auth_value)

    sigma = _context(args)
    response = sigma.remote_sign(args.host, auth_token, timeout=args.timeout)
    print(json.dumps(response.to_dict(), indent=2))
    return 0


def _verify(args) -> int:
    sigma = _context(args)
    valid = sigma.verify(args.recipient_key)
    sig = sigma.sig
    print(json.dumps({"valid": valid, "sig": sig.to_dict() if sig else None}, indent=2))
    return 0 if valid else 1


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "tx_hex",
        help="Raw transaction hex"
    )
    common.add_argument(
        "--vout",
        type=int,
        default=0,
        help="Index of the output carrying the signatures"
    )
    common.add_argument(
        "--instance",
        type=int,
        default=0,
        help="Signature slot within the output"
    )
    common.add_argument(
        "--ref-vin",
        type=int,
        default=0,
        help="Input bound into the signature, -1 to use the output index"
    )
    common.add_argument(
        "--log-level",
        default="ERROR",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level for the sigma_protocol loggers"
    )

    parser = argparse.ArgumentParser(prog="sigma", description="Sign and verify Sigma protocol instances")
    subparsers = parser.add_subparsers(dest="command", required=True)

    hashes = subparsers.add_parser("hashes", parents=[common], help="Show the hash chain for a slot")
    hashes.set_defaults(func=_hashes)

    sign = subparsers.add_parser("sign", parents=[common], help="Sign a slot with a local key")
    sign.add_argument(
        "--key",
        required=True,
        help="Private key as WIF or 64 character hex"
    )
    sign.add_argument(
        "--algorithm",
        default=Algorithm.ECDSA.value,
        choices=[a.value for a in Algorithm],
        help="Signing algorithm"
    )
    sign.add_argument(
        "--verifier",
        help="Compressed public key hex allowed to verify an ALT signature"
    )
    sign.set_defaults(func=_sign)

    remote = subparsers.add_parser("remote-sign", parents=[common], help="Sign a slot with a remote signer")
    remote.add_argument(
        "--host",
        required=True,
        help="Base URL of the remote signer"
    )
    remote.add_argument(
        "--auth-type",
        choices=["header", "query"],
        help="Where the auth token is sent"
    )
    remote.add_argument("--auth-key", help="Auth header or query parameter name")
    remote.add_argument("--auth-value", help="Auth token value")
    remote.add_argument(
        "--timeout",
        type=float,
        default=REMOTE.TIMEOUT,
        help="Request timeout in seconds"
    )
    remote.set_defaults(func=_remote_sign)

    verify = subparsers.add_parser("verify", parents=[common], help="Verify the signature in a slot")
    verify.add_argument(
        "--recipient-key",
        help="Recipient private key for recipient restricted ALT signatures"
    )
    verify.set_defaults(func=_verify)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_log_level(args.log_level)

    try:
        return args.func(args)
    except CLI_ERRORS as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
