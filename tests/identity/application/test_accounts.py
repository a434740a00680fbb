"""Application tests for registration, login and profile handlers."""

import pytest
from identity.user.authentication import INVALID_CREDENTIALS, Login, LoginHandler
from identity.user.profile import ProfileHandler, UpdateProfile
from identity.user.registration import RegisterUser, RegisterUserHandler
from identity.user.user import User
from shared.exceptions import NotFound, Unauthorized, ValidationFailed


def _register(store, **overrides):
    defaults = {
        "name": "Jane Doe",
        "mobile": "9876543210",
        "email": "jane.doe@example.com",
        "password": "s3cret-pass",
    }
    defaults.update(overrides)
    return RegisterUserHandler(store).register_user(RegisterUser(**defaults))


class TestRegisterUser:
    def test_registered_user_is_persisted(self, store):
        user = _register(store)

        with store.session() as session:
            persisted = session.get(User, user.id)
            assert persisted.email == "jane.doe@example.com"
            assert persisted.is_admin is False

    def test_duplicate_mobile_rejected(self, store):
        _register(store)
        with pytest.raises(ValidationFailed) as exc:
            _register(store, email="other@example.com")
        assert exc.value.messages == {"mobile": ["Mobile number is already in use"]}

    def test_duplicate_email_rejected_case_insensitively(self, store):
        _register(store)
        with pytest.raises(ValidationFailed) as exc:
            _register(store, mobile="9123456789", email="JANE.DOE@example.com")
        assert "email" in exc.value.messages

    def test_invalid_registration_persists_nothing(self, store):
        with pytest.raises(ValidationFailed):
            _register(store, password="123")

        with store.session() as session:
            assert session.query(User).count() == 0

    def test_duplicate_that_slips_past_the_lookup_is_rejected(self, store, monkeypatch):
        import identity.user.registration as registration

        _register(store)
        # Both registrations pass the availability check before either commits
        monkeypatch.setattr(registration, "ensure_contact_available", lambda *args, **kwargs: None)

        with pytest.raises(ValidationFailed) as exc:
            _register(store)
        assert "user" in exc.value.messages

        with store.session() as session:
            assert session.query(User).count() == 1


class TestLogin:
    def test_login_with_mobile(self, store, verifier):
        user = _register(store)

        result = LoginHandler(store, verifier).login(Login(mobile="9876543210", password="s3cret-pass"))

        assert result.user.id == user.id
        assert verifier.verify(result.token).id == user.id

    def test_login_with_email(self, store, verifier):
        user = _register(store)

        result = LoginHandler(store, verifier).login(Login(email="Jane.Doe@example.com", password="s3cret-pass"))

        assert result.user.id == user.id

    def test_admin_token_carries_admin_role(self, store, verifier, make_user):
        admin = make_user(is_admin=True, password="adm1n-pass")

        result = LoginHandler(store, verifier).login(Login(email=admin.email, password="adm1n-pass"))

        assert verifier.verify(result.token).is_admin is True

    def test_wrong_password(self, store, verifier):
        _register(store)
        with pytest.raises(Unauthorized) as exc:
            LoginHandler(store, verifier).login(Login(mobile="9876543210", password="wrong-pass"))
        assert exc.value.message == INVALID_CREDENTIALS

    def test_unknown_account_gets_same_message(self, store, verifier):
        with pytest.raises(Unauthorized) as exc:
            LoginHandler(store, verifier).login(Login(mobile="9000000000", password="s3cret-pass"))
        assert exc.value.message == INVALID_CREDENTIALS

    def test_identifier_required(self, store, verifier):
        with pytest.raises(ValidationFailed):
            LoginHandler(store, verifier).login(Login(password="s3cret-pass"))


class TestProfile:
    def test_get_profile(self, store):
        user = _register(store)
        assert ProfileHandler(store).get_profile(user.id).email == user.email

    def test_get_missing_profile(self, store):
        with pytest.raises(NotFound):
            ProfileHandler(store).get_profile("missing")

    def test_update_profile(self, store):
        user = _register(store)

        updated = ProfileHandler(store).update_profile(
            UpdateProfile(user_id=user.id, changes={"name": "Jane Smith", "address": "4 Park Street"})
        )

        assert updated.name == "Jane Smith"
        with store.session() as session:
            assert session.get(User, user.id).address == "4 Park Street"

    def test_keeping_own_email_is_allowed(self, store):
        user = _register(store)
        updated = ProfileHandler(store).update_profile(
            UpdateProfile(user_id=user.id, changes={"email": "jane.doe@example.com"})
        )
        assert updated.email == "jane.doe@example.com"

    def test_taking_another_users_email_is_rejected(self, store, make_user):
        other = make_user(email="taken@example.com")
        user = _register(store)

        with pytest.raises(ValidationFailed) as exc:
            ProfileHandler(store).update_profile(UpdateProfile(user_id=user.id, changes={"email": other.email}))
        assert "email" in exc.value.messages

        with store.session() as session:
            assert session.get(User, user.id).email == "jane.doe@example.com"

    def test_email_taken_concurrently_is_rejected(self, store, make_user, monkeypatch):
        import identity.user.profile as profile

        other = make_user(email="taken@example.com")
        user = _register(store)
        monkeypatch.setattr(profile, "ensure_contact_available", lambda *args, **kwargs: None)

        with pytest.raises(ValidationFailed) as exc:
            ProfileHandler(store).update_profile(UpdateProfile(user_id=user.id, changes={"email": other.email}))
        assert "user" in exc.value.messages

        with store.session() as session:
            assert session.get(User, user.id).email == "jane.doe@example.com"
