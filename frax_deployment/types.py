import click
from eth_utils import to_checksum_address

from frax_deployment.config import get_environment
from frax_deployment.errors import UnknownEnvironmentError


class Environment(click.ParamType):
    name = "environment"

    def convert(self, value, param, ctx):
        try:
            return get_environment(value)
        except UnknownEnvironmentError as e:
            self.fail(str(e), param, ctx)


class ChecksumAddress(click.ParamType):
    name = "checksum_address"

    def convert(self, value, param, ctx):
        try:
            value = to_checksum_address(value=value)
        except ValueError:
            self.fail(f"Invalid ethereum address '{value}'", param, ctx)
        else:
            return value
