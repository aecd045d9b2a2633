"""Small CLI for interacting with the homovote Flask server.

Usage examples:
    python cli.py init --name "Referendum" --choices Yes No --params test
    python cli.py register
    python cli.py vote --voter <uuid> --choice Yes
    python cli.py tally
    python cli.py verify --receipt <receipt> --choice Yes
    python cli.py inclusion --receipt <receipt>
"""

import argparse
import requests

from homovote import config


BASE = config.SERVER_URL
TIMEOUT = config.HTTP_TIMEOUT


def init(name: str, choices, params: str):
    r = requests.post(
        f"{BASE}/init",
        json={"name": name, "choices": choices, "params": params},
        timeout=TIMEOUT,
    )
    print(r.json())


def register(voter_id=None):
    body = {"voter_id": voter_id} if voter_id else {}
    r = requests.post(f"{BASE}/register", json=body, timeout=TIMEOUT)
    print(r.json())


def vote(voter_id: str, choice: str):
    r = requests.post(f"{BASE}/vote", json={"voter_id": voter_id, "choice": choice}, timeout=TIMEOUT)
    print(r.json())


def tally():
    r = requests.post(f"{BASE}/tally", timeout=TIMEOUT)
    print(r.json())


def verify(receipt: str, choice: str):
    r = requests.post(f"{BASE}/verify", json={"receipt": receipt, "choice": choice}, timeout=TIMEOUT)
    print(r.json())


def inclusion(receipt: str):
    r = requests.get(f"{BASE}/inclusion/{receipt}", timeout=TIMEOUT)
    print(r.json())


def main():
    p = argparse.ArgumentParser()
    sub = p.add_subparsers(dest="cmd")
    i = sub.add_parser("init")
    i.add_argument("--name", default=config.DEFAULT_ELECTION_NAME)
    i.add_argument("--choices", nargs="+", default=config.DEFAULT_CHOICES)
    i.add_argument("--params", default=config.PARAMS_PRESET)
    r = sub.add_parser("register")
    r.add_argument("--voter")
    v = sub.add_parser("vote")
    v.add_argument("--voter", required=True)
    v.add_argument("--choice", required=True)
    sub.add_parser("tally")
    c = sub.add_parser("verify")
    c.add_argument("--receipt", required=True)
    c.add_argument("--choice", required=True)
    n = sub.add_parser("inclusion")
    n.add_argument("--receipt", required=True)
    args = p.parse_args()
    if args.cmd == "init":
        init(args.name, args.choices, args.params)
    elif args.cmd == "register":
        register(args.voter)
    elif args.cmd == "vote":
        vote(args.voter, args.choice)
    elif args.cmd == "tally":
        tally()
    elif args.cmd == "verify":
        verify(args.receipt, args.choice)
    elif args.cmd == "inclusion":
        inclusion(args.receipt)
    else:
        p.print_help()


if __name__ == "__main__":
    main()
