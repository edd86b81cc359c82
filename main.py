import logging
from decimal import Decimal

from rich.logging import RichHandler
from rich.pretty import pprint

from shellbind import *


class Calculator:
    __prefix__ = "calc"

    @command(descr="add two numbers")
    def add(self, x=positional(type=Decimal), y=positional(type=Decimal), verbose=flag()):
        if verbose:
            print(f"{x} + {y} =", end=" ")
        print(x + y)

    @command(name="sum", descr="sum a comma-separated list")
    def total(self, values=positional(type=list[int])):
        print(sum(values))


@command
def greet(name=required(descr="who to greet"), *, times=optional(type=int, default=1)):
    """Say hello."""
    for _ in range(times):
        print(f"hello, {name}")


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format="%(message)s", handlers=[RichHandler()])
    shell = Shell(Calculator(), greet, fancy=True)
    pprint(shell.commands)
    shell.run()
