import unittest
from unittest.mock import MagicMock

from ioclite import Container, inject, inject_constructor, inject_method, singleton, value


@singleton
class Logger:
    def log(self, message: str) -> str:
        return f"Log: {message}"


class TestFieldInjection(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_inject_field_inferred_from_annotation(self):
        @singleton
        class Database:
            def connect(self):
                return "Connected"

        @singleton
        class UserService:
            database: Database = inject()

            def get_connection(self):
                return self.database.connect()

        self.cont.register_annotated_classes(Database, UserService)

        user_service = self.cont.resolve(UserService)
        assert user_service.get_connection() == "Connected"

    def test_inject_field_with_explicit_string_token(self):
        @singleton
        class Database: ...

        @singleton
        class UserService:
            db = inject("Database")

        self.cont.register_annotated_classes(Database, UserService)
        assert self.cont.resolve(UserService).db is self.cont.resolve(Database)

    def test_inject_field_with_class_token_uses_declared_token(self):
        @singleton(token="primary-db")
        class Database: ...

        @singleton
        class UserService:
            db = inject(Database)

        self.cont.register_annotated_classes(Database, UserService)

        svc = self.cont.resolve(UserService)
        assert svc.db is self.cont.resolve("primary-db")

    def test_fields_assigned_in_declaration_order(self):
        order = []

        class Recording:
            def __setattr__(self, name, val):
                order.append(name)
                super().__setattr__(name, val)

        @singleton
        class Service(Recording):
            first = value("one")
            second = value("two")
            third = value("three")

        self.cont.register_class(Service)
        for key in ("one", "two", "three"):
            self.cont.set_configuration(key, key)

        svc = self.cont.resolve(Service)
        assert order == ["first", "second", "third"]
        assert (svc.first, svc.second, svc.third) == ("one", "two", "three")

    def test_injected_field_is_not_a_class_attribute(self):
        @singleton
        class Service:
            logger: Logger = inject()

        assert "logger" not in Service.__dict__
        assert not hasattr(Service(), "logger")


class TestMethodInjection(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_inject_method_receives_dependencies(self):
        @singleton
        class Service:
            last_log = ""

            @inject_method("Logger")
            def initialize(self, logger: Logger):
                self.last_log = logger.log("Service initialized")

            def get_last_log(self):
                return self.last_log

        self.cont.register_annotated_classes(Logger, Service)

        service = self.cont.resolve(Service)
        assert service.get_last_log() == "Log: Service initialized"

    def test_field_injection_completes_before_method_injection(self):
        @singleton
        class Service:
            logger: Logger = inject()
            name: str = value("service.name")

            @inject_method()
            def initialize(self):
                # relies on both fields already being assigned
                self.last_log = self.logger.log(f"{self.name} initialized")

        self.cont.set_configuration("service.name", "billing")
        self.cont.register_annotated_classes(Logger, Service)

        assert self.cont.resolve(Service).last_log == "Log: billing initialized"

    def test_method_tokens_resolved_in_declared_order(self):
        @singleton
        class Service:
            @inject_method("b", "a", Logger)
            def configure(self, *args):
                self.args = args

        logger = Logger()
        self.cont.set_configuration("a", 1)
        self.cont.set_configuration("b", 2)
        self.cont.set_configuration("Logger", logger)
        self.cont.register_class(Service)

        assert self.cont.resolve(Service).args == (2, 1, logger)

    def test_methods_invoked_in_declaration_order(self):
        calls = []

        @singleton
        class Service:
            @inject_method()
            def first(self):
                calls.append("first")

            def untouched(self):
                calls.append("untouched")

            @inject_method()
            def second(self):
                calls.append("second")

        self.cont.register_class(Service)
        self.cont.resolve(Service)
        assert calls == ["first", "second"]

    def test_inject_method_leaves_plain_function_on_class(self):
        @singleton
        class Service:
            @inject_method("Logger")
            def initialize(self, logger):
                self.logger = logger

        svc = Service()
        svc.initialize("manual")
        assert svc.logger == "manual"


class TestConstructorInjection(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_inject_constructor_inferred_from_annotations(self):
        @singleton
        class GreetingService:
            def greet(self, name: str):
                return f"Hello, {name}!"

        @singleton
        class UserService:
            @inject_constructor()
            def __init__(self, greeting_service: GreetingService):
                self._greeting_service = greeting_service

            def greet_user(self, name: str):
                return self._greeting_service.greet(name)

        self.cont.register_class(GreetingService)
        self.cont.register_class(UserService)

        user_service = self.cont.resolve(UserService)
        assert user_service.greet_user("Alice") == "Hello, Alice!"

    def test_inject_constructor_positional_named_and_inferred_tokens(self):
        @singleton
        class Repo: ...

        @singleton
        class Service:
            @inject_constructor("dbUrl", None, timeout="db.timeout")
            def __init__(self, url: str, repo: Repo, timeout: int, retries):
                self.url = url
                self.repo = repo
                self.timeout = timeout
                self.retries = retries

        self.cont.set_configuration("dbUrl", "sqlite://")
        self.cont.set_configuration("db.timeout", 30)
        # unannotated parameters fall back to their name
        self.cont.set_configuration("retries", 3)
        self.cont.register_annotated_classes(Repo, Service)

        svc = self.cont.resolve(Service)
        assert svc.url == "sqlite://"
        assert svc.repo is self.cont.resolve(Repo)
        assert svc.timeout == 30
        assert svc.retries == 3

    def test_constructor_runs_before_field_and_method_injection(self):
        events = []

        @singleton
        class Service:
            logger: Logger = inject()

            @inject_constructor(name="service.name")
            def __init__(self, name):
                events.append(("init", hasattr(self, "logger")))
                self.name = name

            @inject_method()
            def ready(self):
                events.append(("ready", self.logger is not None))

        self.cont.set_configuration("service.name", "svc")
        self.cont.register_annotated_classes(Logger, Service)
        self.cont.resolve(Service)

        assert events == [("init", False), ("ready", True)]


class TestWiringWithMocks(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()
        self.sdk = MagicMock()
        self.sdk.pay.return_value = True
        self.cont.set_configuration("PaymentSdk", self.sdk)
        self.cont.set_configuration("usd_per_cent", 0.0125)

    def test_adapter_calls_configured_sdk(self):
        @singleton
        class PaymentAdapter:
            @inject_constructor("PaymentSdk", "usd_per_cent")
            def __init__(self, sdk, usd_per_cent):
                self._sdk = sdk
                self._usd_per_cent = usd_per_cent

            def charge(self, order_id: str, amount_cents: int) -> None:
                if not self._sdk.pay(amount_cents * self._usd_per_cent, reference=order_id):
                    msg = "payment failed"
                    raise RuntimeError(msg)

        self.cont.register_class(PaymentAdapter)
        self.cont.resolve(PaymentAdapter).charge("order-123", 5000)

        assert self.sdk.pay.call_count == 1
        assert self.sdk.pay.call_args[0][0] == 0.0125 * 5000
        assert self.sdk.pay.call_args[1]["reference"] == "order-123"
