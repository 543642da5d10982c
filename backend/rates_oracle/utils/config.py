import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    # Network
    RPC_URL = os.getenv('RPC_URL')

    # Currencies signing key
    PRIVATE_KEY = os.getenv('PRIVATE_KEY')

    # Currencies contract
    CURRENCIES_CONTRACT = os.getenv('CURRENCIES_CONTRACT')
    CURRENCIES_ACCOUNT = os.getenv('CURRENCIES_ACCOUNT')
    CURRENCIES_PERMISSION = os.getenv('CURRENCIES_PERMISSION', 'active')
    UPDATE_RATES_ACTION = 'updaterates'

    # Decimal places the contract expects for rate values
    PRECISION = os.getenv('PRECISION', '4')

    # Transaction validity window
    BLOCKS_BEHIND = int(os.getenv('BLOCKS_BEHIND', '3'))
    EXPIRE_SECONDS = int(os.getenv('EXPIRE_SECONDS', '30'))

    # Paths
    CURRENCIES_ABI_PATH = os.getenv('CURRENCIES_ABI_PATH')

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def precision(cls) -> int:
        """PRECISION as a non-negative integer"""
        try:
            value = int(cls.PRECISION)
        except (TypeError, ValueError):
            raise ValueError(f"PRECISION must be an integer, got {cls.PRECISION!r}")
        if value < 0:
            raise ValueError(f"PRECISION must be >= 0, got {value}")
        return value

    @classmethod
    def validate(cls):
        """Validate all required config is present"""
        required = [
            'RPC_URL',
            'PRIVATE_KEY',
            'CURRENCIES_CONTRACT',
            'CURRENCIES_ACCOUNT'
        ]

        missing = [key for key in required if not getattr(cls, key)]

        if missing:
            raise ValueError(f"Missing required config: {', '.join(missing)}")

        cls.precision()
