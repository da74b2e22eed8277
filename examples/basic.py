from graphdump import RESULT_NAME, dump


def main():
    shared = {"unit": "ms"}
    config = {"timeouts": [100, 250, float("inf")], "a": shared, "b": shared}
    config["self"] = config

    script = dump(config)
    print(script)

    namespace = {}
    exec(script, namespace)
    rebuilt = namespace[RESULT_NAME]
    print(f"shared kept: {rebuilt['a'] is rebuilt['b']}")
    print(f"cycle kept: {rebuilt['self'] is rebuilt}")


main()
