"""
STS Role Assumption Client
Exchanges the active profile's credentials for temporary role credentials
"""

import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError, ProfileNotFound

from assume_setup import constants

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Raised when AWS refuses or cannot perform a credential exchange."""
    pass


class Credentials:
    """Temporary credentials returned by STS."""

    def __init__(self, access_key_id: str, secret_access_key: str, session_token: str,
                 expiration=None):
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.session_token = session_token
        self.expiration = expiration

    def to_exports(self) -> str:
        """Render the credentials as shell export statements."""
        values = [self.access_key_id, self.secret_access_key, self.session_token]
        return "".join(
            f"export {name}={value}\n"
            for name, value in zip(constants.CREDENTIAL_ENV_VARS, values)
        )

    def __str__(self):
        return f"Credentials(access_key_id={self.access_key_id}, expiration={self.expiration})"


def clamp_duration(duration_seconds: int) -> int:
    return max(constants.MIN_DURATION_SECONDS, min(constants.MAX_DURATION_SECONDS, duration_seconds))


class RoleAssumptionClient:
    """Calls STS with the credential chain of a single AWS profile."""

    def __init__(self, profile_name: Optional[str] = None, region_name: Optional[str] = None):
        self.profile_name = profile_name
        self.region_name = region_name
        self._sts = None

    def _client(self):
        if self._sts is None:
            try:
                session = boto3.Session(profile_name=self.profile_name, region_name=self.region_name)
                self._sts = session.client("sts")
            except ProfileNotFound as e:
                raise AuthError(f"AWS profile not found: {e}")
            except BotoCoreError as e:
                raise AuthError(f"Failed to create STS client: {e}")
        return self._sts

    def _call(self, operation: str, **kwargs) -> dict:
        sts = self._client()
        try:
            return getattr(sts, operation)(**kwargs)
        except NoCredentialsError:
            raise AuthError(
                f"No AWS credentials found for profile '{self.profile_name or constants.DEFAULT_PROFILE}'"
            )
        except ClientError as e:
            error = e.response.get("Error", {})
            raise AuthError(f"{error.get('Code', 'Unknown')}: {error.get('Message', str(e))}")
        except BotoCoreError as e:
            raise AuthError(str(e))

    def assume_role(self, role_arn: str, session_name: str,
                    duration_seconds: int = constants.DEFAULT_DURATION_SECONDS) -> Credentials:
        """
        Assume role_arn and return its temporary credentials.

        Args:
            role_arn: ARN of the role to assume
            session_name: RoleSessionName recorded in CloudTrail
            duration_seconds: Lifetime of the credentials, clamped to what STS accepts

        Raises:
            AuthError: If the exchange is denied or no source credentials exist
        """
        duration = clamp_duration(duration_seconds)
        logger.info(f"Assuming role {role_arn} as session '{session_name}' for {duration}s")
        response = self._call(
            "assume_role",
            RoleArn=role_arn,
            RoleSessionName=session_name,
            DurationSeconds=duration,
        )
        creds = response["Credentials"]
        logger.debug(f"Assumed role {response.get('AssumedRoleUser', {}).get('Arn', role_arn)}")
        return Credentials(
            access_key_id=creds["AccessKeyId"],
            secret_access_key=creds["SecretAccessKey"],
            session_token=creds["SessionToken"],
            expiration=creds.get("Expiration"),
        )

    def get_caller_identity(self) -> dict:
        """Return Account, Arn and UserId of the current credentials."""
        response = self._call("get_caller_identity")
        return {
            "Account": response.get("Account"),
            "Arn": response.get("Arn"),
            "UserId": response.get("UserId"),
        }
