pytest_plugins = ["tests.fixtures.env", "tests.fixtures.k8s"]
