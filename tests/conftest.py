import logging
import random
from pathlib import Path

import pytest
from eth_utils import to_checksum_address
from pytest import FixtureRequest

from nethermind.calllink.abi import parse_abi, select_function
from nethermind.calllink.types import AbiDocument, FunctionSignature
from tests.resources.abi import ERC20_ABI_JSON, ORDER_BOOK_ABI_JSON


@pytest.fixture(name="random_address")
def fixture_random_address():
    def _generate_random_address():
        return to_checksum_address(random.randbytes(20).hex())

    return _generate_random_address


@pytest.fixture(name="erc20_abi")
def fixture_erc20_abi() -> AbiDocument:
    return parse_abi(ERC20_ABI_JSON)


@pytest.fixture(name="transfer_signature")
def fixture_transfer_signature(erc20_abi) -> FunctionSignature:
    return select_function(erc20_abi, "transfer")


@pytest.fixture(name="order_book_abi")
def fixture_order_book_abi() -> AbiDocument:
    return parse_abi(ORDER_BOOK_ABI_JSON)


@pytest.fixture(scope="function")
def debug_logger(request: FixtureRequest):
    log_filename = request.module.__name__ + "." + request.function.__name__

    log_dir = Path(__file__).parent / "logs"
    log_dir.mkdir(exist_ok=True)

    formatter = logging.Formatter(
        "%(levelname)-8s | %(name)-36s | %(asctime)-15s | %(message)s \t\t (%(filename)s --> %(funcName)s)"
    )

    file_handler = logging.FileHandler(log_dir / f"{log_filename}.log")
    file_handler.setFormatter(formatter)

    logger = logging.getLogger("nethermind")
    logger.addHandler(file_handler)
    logger.setLevel(logging.DEBUG)

    logger.info("-" * 100)
    logger.info(f"\t\tInitializing New Run for Test: {request.function.__name__}")
    logger.info("-" * 100)

    yield logger

    logger.removeHandler(file_handler)
    file_handler.close()
