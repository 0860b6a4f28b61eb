"""Interactive CLI simulator: walk through the OTP login flow without HTTP or Redis."""

import asyncio
import logging

from otp_auth.config import settings
from otp_auth.database.engine import async_session_factory, init_db
from otp_auth.database.repository import UserRepository
from otp_auth.errors import AuthError
from otp_auth.kvstore.memory_store import InMemoryStore
from otp_auth.services.auth_service import AuthService
from otp_auth.services.otp_store import OTPChallengeStore
from otp_auth.services.rate_limiter import RateLimiter
from otp_auth.services.session_issuer import SessionIssuer

GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
BOLD = "\033[1m"
RESET = "\033[0m"

SIMULATED_ADDRESS = "127.0.0.1"


async def main() -> None:
    # Codes are "delivered" through this logger.
    logging.basicConfig(level=logging.WARNING, format=f"{DIM}%(message)s{RESET}")
    logging.getLogger("otp_auth.delivery").setLevel(logging.INFO)

    print(f"\n{BOLD}{'=' * 52}")
    print("  🔐  OTP Auth Login Simulator")
    print(f"{'=' * 52}{RESET}\n")
    print(f"{DIM}Tip: use an Iranian mobile number such as 09123456789{RESET}")
    print(f"{DIM}     Type 'quit' to exit{RESET}\n")

    await init_db()

    store = InMemoryStore()
    challenges = OTPChallengeStore(store)
    limiter = RateLimiter(
        store,
        count=settings.otp_rate_limit_count,
        window_seconds=settings.otp_rate_limit_window_seconds,
        address_multiplier=settings.otp_address_limit_multiplier,
    )
    sessions = SessionIssuer(
        secret=settings.jwt_secret,
        validity_seconds=settings.jwt_expiration_seconds,
        algorithm=settings.jwt_algorithm,
    )

    while True:
        try:
            phone = input(f"{YELLOW}Phone number: {RESET}").strip()
        except (KeyboardInterrupt, EOFError):
            print(f"\n{DIM}Goodbye!{RESET}")
            break
        if phone.lower() == "quit":
            print(f"{DIM}Goodbye!{RESET}")
            break

        async with async_session_factory() as db_session:
            auth = AuthService(
                users=UserRepository(db_session),
                challenges=challenges,
                limiter=limiter,
                sessions=sessions,
                otp_length=settings.otp_length,
                otp_ttl_seconds=settings.otp_expiration_seconds,
            )
            try:
                accepted = await auth.request_challenge(phone, SIMULATED_ADDRESS)
                print(f"Code sent; valid for {accepted.expires_in_seconds}s.")
                code = input(f"{YELLOW}Code: {RESET}").strip()
                result = await auth.verify_challenge(phone, code)
                await db_session.commit()
            except AuthError as exc:
                print(f"{RED}✗ {exc.message} ({exc.kind}){RESET}\n")
                continue

        status = "new account" if result.created else "welcome back"
        print(f"{GREEN}{BOLD}✓ Authenticated{RESET} ({status}) user {result.user.id}")
        print(f"{DIM}Token: {result.token}{RESET}\n")


if __name__ == "__main__":
    asyncio.run(main())
