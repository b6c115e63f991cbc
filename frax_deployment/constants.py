from enum import Enum
from pathlib import Path

from ape.utils import ZERO_ADDRESS  # noqa: F401

import frax_deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(frax_deployment.__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"
REGISTRY_FILENAME = "addresses.json"

#
# Environments
#

LOCAL = "local"
TESTNET = "testnet"
PRODUCTION = "production"

SUPPORTED_ENVIRONMENTS = [LOCAL, TESTNET, PRODUCTION]


class ResolutionMode(Enum):
    FRESH = "fresh"
    ATTACH = "attach"


DEFAULT_RESOLUTION_MODES = {
    LOCAL: ResolutionMode.FRESH,
    TESTNET: ResolutionMode.ATTACH,
    PRODUCTION: ResolutionMode.ATTACH,
}

#
# Manifest categories (in the order they are written)
#

MAIN = "main"
WETH = "weth"
ORACLES = "oracles"
COLLATERAL = "collateral"
GOVERNANCE = "governance"
POOLS = "pools"
UNISWAP_OTHER = "uniswap_other"
PRICING = "pricing"
MISC = "misc"
LIBRARIES = "libraries"
STAKE_TOKENS = "stake_tokens"
STAKING_CONTRACTS = "staking_contracts_for_tokens"

MANIFEST_CATEGORIES = [
    MAIN,
    WETH,
    ORACLES,
    COLLATERAL,
    GOVERNANCE,
    POOLS,
    UNISWAP_OTHER,
    PRICING,
    MISC,
    LIBRARIES,
    STAKE_TOKENS,
    STAKING_CONTRACTS,
]

# categories holding a single address instead of a name -> address mapping
SCALAR_CATEGORIES = [WETH, GOVERNANCE]

LIBRARY_NAMES = ["UniswapV2OracleLibrary", "UniswapV2Library", "FraxPoolLibrary"]

#
# Actors
#

COLLATERAL_FRAX_AND_FXS_OWNER = "collateral_frax_and_fxs_owner"
ORACLE_ADDRESS = "oracle_address"
POOL_CREATOR = "pool_creator"
TIMELOCK_ADMIN = "timelock_admin"
GOVERNOR_GUARDIAN = "governor_guardian"
STAKING_OWNER = "staking_owner"
STAKING_REWARDS_DISTRIBUTOR = "staking_rewards_distributor"

ACTOR_ROLES = [
    COLLATERAL_FRAX_AND_FXS_OWNER,
    ORACLE_ADDRESS,
    POOL_CREATOR,
    TIMELOCK_ADMIN,
    GOVERNOR_GUARDIAN,
    STAKING_OWNER,
    STAKING_REWARDS_DISTRIBUTOR,
]

#
# Pricing
#

PRICE_PRECISION = 10**6

# actor deploying a component unless its params entry names a 'deployer'
DEFAULT_DEPLOYER = COLLATERAL_FRAX_AND_FXS_OWNER
