"""Repository layer for accounts.

Provides lookups, credential checks and registration over the `users`
collection. Login and telegram uniqueness is checked inside the `users` lock so
two concurrent registrations cannot both claim the same value; the direction
is resolved under the `directions` lock so it cannot be deleted meanwhile.
"""

import logging

from packages.common.errors import DuplicateLogin, DuplicateTelegram, InvalidCredentials
from packages.common.storage import DIRECTIONS, USERS, Document, RecordStore
from packages.schemas.accounts import Account, RegisterRequest
from services.catalog.repo import CatalogRepo, new_id
from .passwords import hash_password, verify_password

log = logging.getLogger(__name__)


class AccountRepo:
    """Accounts stored as a whole-collection snapshot."""

    def __init__(self, store: RecordStore, catalog: CatalogRepo, bcrypt_rounds: int = 10) -> None:
        self.store = store
        self.catalog = catalog
        self.bcrypt_rounds = bcrypt_rounds

    def accounts(self) -> list[Account]:
        return Account.parse_many(self.store.load(USERS))

    def get(self, account_id: str) -> Account | None:
        return next((a for a in self.accounts() if a.id == account_id), None)

    def authenticate(self, login: str, password: str) -> Account:
        """Return the account for a login/password pair.

        Raises:
            InvalidCredentials: unknown login or wrong password (indistinguishable).
        """
        account = next((a for a in self.accounts() if a.login == login), None)
        if account is None or not verify_password(password, account.password):
            raise InvalidCredentials()
        return account

    def register(self, data: RegisterRequest) -> Account:
        """Create a learner account.

        Raises:
            DuplicateLogin: the login is already used.
            DuplicateTelegram: the telegram username is already used.
            UnknownDirection: the direction does not exist.
        """
        hashed = hash_password(data.password, self.bcrypt_rounds)

        def _register(docs: list[Document]) -> Account:
            existing = Account.parse_many(docs)
            if any(a.login == data.login for a in existing):
                raise DuplicateLogin(detail=data.login)
            if any(a.telegram == data.telegram for a in existing):
                raise DuplicateTelegram(detail=data.telegram)
            account = Account(
                id=new_id(),
                first_name=data.first_name,
                last_name=data.last_name,
                direction=direction.id,
                direction_name=direction.name,
                phone=data.phone,
                telegram=data.telegram,
                login=data.login,
                password=hashed,
                is_admin=False,
            )
            docs.append(account.to_doc())
            return account

        with self.store.locked(DIRECTIONS):
            direction = self.catalog.resolve_direction(data.direction)
            account = self.store.update(USERS, _register)
        log.info(f"Account {account.id} registered for login '{account.login}'")
        return account
