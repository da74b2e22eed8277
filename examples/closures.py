import logging

from graphdump import RESULT_NAME, Dumper, DumpOptions


def make_account(balance):
    def deposit(amount):
        nonlocal balance
        balance += amount
        return balance

    def read():
        return balance

    return deposit, read


def main():
    logging.basicConfig(level=logging.DEBUG)

    deposit, read = make_account(100)
    deposit(50)

    # Both closures capture the same cell; the script rebuilds it once
    dumper = Dumper(options=DumpOptions(max_entries=1_000))
    script = dumper.dump({"deposit": deposit, "read": read})

    namespace = {}
    exec(script, namespace)
    account = namespace[RESULT_NAME]

    account["deposit"](25)
    print(f"original balance: {read()}")
    print(f"rebuilt balance: {account['read']()}")


main()
