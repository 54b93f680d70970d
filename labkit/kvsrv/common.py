"""Arguments and replies of the key/value service RPCs.

Field names start with capital letters so the values travel over RPC
without labgob warnings.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PutAppendArgs:
    """Arguments of a Put or an Append."""

    Key: str = ""
    Value: str = ""
    ReqID: int = 0
    ClientID: int = 0


@dataclass
class PutAppendReply:
    """Reply to a Put or an Append; an Append carries the value before it."""

    Value: str = ""


@dataclass
class GetArgs:
    Key: str = ""
    ReqID: int = 0
    ClientID: int = 0


@dataclass
class GetReply:
    Value: str = ""