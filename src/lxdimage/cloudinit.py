"""Default cloud-init seed templates injected into built images."""

from typing import List

from lxdimage.models.template import Template


SEED_DIR = "/var/lib/cloud/seed/nocloud-net"

DEFAULT_WHEN = ["create", "copy"]

META_DATA_TEMPLATE = """#cloud-config
instance-id: {{ container.name }}
local-hostname: {{ container.name }}
{{ config_get("user.meta-data", "") }}"""

NETWORK_CONFIG_TEMPLATE = """{% if config_get("user.network-config", "") == "" %}version: 1
config:
    - type: physical
      name: eth0
      subnets:
          - type: {% if config_get("user.network_mode", "") == "link-local" %}manual{% else %}dhcp{% endif %}
            control: auto{% else %}{{ config_get("user.network-config", "") }}{% endif %}"""

USER_DATA_TEMPLATE = """{{ config_get("user.user-data", properties.default) }}"""

VENDOR_DATA_TEMPLATE = """{{ config_get("user.vendor-data", properties.default) }}"""

EMPTY_CLOUD_CONFIG = "#cloud-config\n{}"


def cloud_init_templates() -> List[Template]:
    """Return the meta-data, network-config, user-data and vendor-data seeds."""
    return [
        Template(
            template="cloud-init-meta.tpl",
            when=list(DEFAULT_WHEN),
            path=f"{SEED_DIR}/meta-data",
            content=META_DATA_TEMPLATE,
        ),
        Template(
            template="cloud-init-network.tpl",
            when=list(DEFAULT_WHEN),
            path=f"{SEED_DIR}/network-config",
            content=NETWORK_CONFIG_TEMPLATE,
        ),
        Template(
            properties={"default": EMPTY_CLOUD_CONFIG},
            template="cloud-init-user.tpl",
            when=list(DEFAULT_WHEN),
            path=f"{SEED_DIR}/user-data",
            content=USER_DATA_TEMPLATE,
        ),
        Template(
            properties={"default": EMPTY_CLOUD_CONFIG},
            template="cloud-init-vendor.tpl",
            when=list(DEFAULT_WHEN),
            path=f"{SEED_DIR}/vendor-data",
            content=VENDOR_DATA_TEMPLATE,
        ),
    ]
