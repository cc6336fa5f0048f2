# ✅ ДЕФОЛТНАЯ СЕТЬ (Monad Testnet, роутер Bean)
DEFAULT_NETWORK = {
    'name': 'Monad Testnet',
    'rpc_url': 'https://testnet-rpc.monad.xyz',
    'explorer': 'https://testnet.monadexplorer.com/tx/',
    'chain_id': 10143,
    'native_token': 'MON',
    'contracts': {
        'router': '0xCa810D095e90Daae6e867c19DF6D9A8C56db2c89',
        'wrapped_native': '0x760AfE86e5de5fa0Ee542fc7B7B713e1c5425701'
    }
}

# ✅ ВСТРОЕННЫЕ ТОКЕНЫ (address=None -> нативный актив)
DEFAULT_TOKENS = {
    'MON': {'address': None, 'decimals': 18},
    'WMON': {'address': '0x760AfE86e5de5fa0Ee542fc7B7B713e1c5425701', 'decimals': 18},
    'USDC': {'address': '0x62534E4bBD6D9ebAC0ac99aeaa0aa48E56372df0', 'decimals': 6},
    'BEAN': {'address': '0x268E4E24E0051EC27b3D27A95977E71cE6875a05', 'decimals': 18},
    'JAI': {'address': '0x70F893f65E3C1d7f82aad72f71615eb220b74D10', 'decimals': 18},
}

MAX_UINT256 = 2 ** 256 - 1

# Слиппедж 5%: minOut = amountOut * 95 // 100
SLIPPAGE_NUMERATOR = 95
SLIPPAGE_DENOMINATOR = 100

GAS_LIMIT_MIN = 250000
GAS_LIMIT_MAX = 350000
FEE_PREMIUM_PERCENT = 110

MAX_SWAP_ATTEMPTS = 5
SWAP_DEADLINE_SECONDS = 6 * 3600
RECEIPT_TIMEOUT = 180

APPROVE_GAS_LIMIT = 100000
WRAP_GAS_LIMIT = 120000

AMOUNT_PRECISION = 6
