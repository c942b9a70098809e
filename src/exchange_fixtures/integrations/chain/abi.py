"""Minimal contract ABIs for the exchange, its tokens and the dummy token."""

# ERC20 plus the dummy token's owner-only setBalance
TOKEN_ABI = [
    {
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "_owner", "type": "address"},
            {"name": "_spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "_to", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "transfer",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "_spender", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "_target", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "setBalance",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

EXCHANGE_ABI = [
    # fillOrder - fill up to fillTakerTokenAmount of a signed order
    {
        "inputs": [
            {"name": "orderAddresses", "type": "address[5]"},
            {"name": "orderValues", "type": "uint256[6]"},
            {"name": "fillTakerTokenAmount", "type": "uint256"},
            {"name": "shouldThrowOnInsufficientBalanceOrAllowance", "type": "bool"},
            {"name": "v", "type": "uint8"},
            {"name": "r", "type": "bytes32"},
            {"name": "s", "type": "bytes32"},
        ],
        "name": "fillOrder",
        "outputs": [{"name": "filledTakerTokenAmount", "type": "uint256"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"name": "orderHash", "type": "bytes32"}],
        "name": "getUnavailableTakerTokenAmount",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "", "type": "bytes32"}],
        "name": "filled",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "", "type": "bytes32"}],
        "name": "cancelled",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "TOKEN_TRANSFER_PROXY_CONTRACT",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
]
