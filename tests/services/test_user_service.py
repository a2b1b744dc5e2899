# tests/services/test_user_service.py

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.dao.identity.user_dao import UserDao
from marketplace.services.identity.user_service import UserService
from marketplace.services.exceptions import EmailAlreadyExistsError
from tests.conftest import stored_files, file_for

pytestmark = pytest.mark.asyncio


@pytest.fixture
async def member(user_factory):
    return (await user_factory(name="Member")).user


class TestUpdateProfile:

    async def test_new_image_replaces_old_one(self, context_factory, member, payload_factory, upload_dir):
        service = UserService(context_factory(member))
        first = await service.update_profile({}, profile_image=payload_factory("me.png", b"first", field="profile_image"))

        second = await service.update_profile({"bio": "Hello"}, profile_image=payload_factory("me2.png", b"second", field="profile_image"))

        assert second.bio == "Hello"
        assert stored_files(upload_dir) == [file_for(upload_dir, second.profile_image).name]
        assert first.profile_image != second.profile_image

    async def test_failed_update_keeps_old_image(self, context_factory, member, payload_factory, upload_dir, monkeypatch, db_session: AsyncSession):
        member_id = member.id
        service = UserService(context_factory(member))
        before = await service.update_profile({}, profile_image=payload_factory("old.png", b"old", field="profile_image"))
        files_before = stored_files(upload_dir)

        async def failing_update(self, instance, values, auto_flush=True):
            raise RuntimeError("database unavailable")
        monkeypatch.setattr(UserDao, "update", failing_update)

        with pytest.raises(RuntimeError):
            await service.update_profile(
                {"bio": "Never saved"}, profile_image=payload_factory("new.png", b"new", field="profile_image")
            )

        assert stored_files(upload_dir) == files_before
        assert file_for(upload_dir, before.profile_image).read_bytes() == b"old"
        stored = await UserDao(db_session).get_by_pk(member_id)
        assert stored.profile_image == before.profile_image
        assert stored.bio != "Never saved"

    async def test_taken_email_stages_nothing(self, context_factory, member, user_factory, payload_factory, upload_dir):
        other = (await user_factory(name="Other")).user

        with pytest.raises(EmailAlreadyExistsError):
            await UserService(context_factory(member)).update_profile(
                {"email": other.email.upper()}, profile_image=payload_factory("me.png", field="profile_image")
            )

        assert stored_files(upload_dir) == []
