"""Local signing identity for oneshot-agent.

The local wallet is an ordinary EOA whose key lives on this machine (raw key
or encrypted keystore). It submits transactions directly and signs
delegations that let a 1Shot custodial wallet act on its behalf.
"""

from oneshot_agent.wallet.chains import CHAINS, Chain, get_chain
from oneshot_agent.wallet.signer import LocalSigner

__all__ = ["CHAINS", "Chain", "LocalSigner", "get_chain"]
