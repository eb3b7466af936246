"""
Script to create or verify the bootstrap administrator
Run this script if you're having trouble logging in with the admin account
"""
import asyncio
import sys

from agriportal.core.config import settings
from agriportal.core.security import verify_password
from agriportal.db.session import AsyncSessionLocal
from agriportal.repositories.user_repository import UserRepository
from agriportal.services.auth_service import AuthService


async def create_or_verify_admin():
    """Create the administrator if missing, then check the configured password"""
    print("🔍 Checking for administrator...")
    print(f"   Username: {settings.SUPER_ADMIN_USERNAME}")

    async with AsyncSessionLocal() as db:
        try:
            created = await AuthService(db).ensure_admin(
                settings.SUPER_ADMIN_USERNAME,
                settings.SUPER_ADMIN_PASSWORD,
                settings.SUPER_ADMIN_PHONE,
            )
            await db.commit()
            if created:
                print("✅ Administrator created")

            admin = await UserRepository(db).get_by_username(settings.SUPER_ADMIN_USERNAME)
            if admin is None or not admin.is_admin:
                print("⚠️  Another administrator already exists, the configured account was not promoted")
                return None

            print(f"   ID: {admin.id}")
            print(f"   Role: {admin.role}")
            print(f"   Phone: {admin.phone_number}")
            if verify_password(settings.SUPER_ADMIN_PASSWORD, admin.password_hash):
                print("✅ Password is correct!")
            else:
                print("⚠️  Password doesn't match SUPER_ADMIN_PASSWORD, change it from the profile page")
            return admin
        except Exception as e:
            await db.rollback()
            print(f"❌ Error: {e}")
            return None


if __name__ == "__main__":
    print("=" * 60)
    print("Administrator Creation/Verification Script")
    print("=" * 60)

    result = asyncio.run(create_or_verify_admin())
    if result is None:
        print("❌ Script failed. Please check the messages above.")
        sys.exit(1)
    print("✅ Script completed successfully!")
