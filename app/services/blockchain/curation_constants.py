"""
Curation contract constants.

ABI fragment and topic of the ``Curation`` event plus the IPFS URI
scheme recognized as an article reference.
"""

CURATION_EVENT_SIGNATURE = "Curation(address,address,address,string,uint256)"

# keccak256 of CURATION_EVENT_SIGNATURE
CURATION_EVENT_TOPIC = (
    "0xc2e41b3d49bbccbac6ceb142bad6119608adf4f1ee1ca5cc6fc332e0ca2fc602"
)

CURATION_ABI = [
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "curator", "type": "address"},
            {"indexed": True, "name": "creator", "type": "address"},
            {"indexed": True, "name": "token", "type": "address"},
            {"indexed": False, "name": "uri", "type": "string"},
            {"indexed": False, "name": "amount", "type": "uint256"},
        ],
        "name": "Curation",
        "type": "event",
    }
]

IPFS_URI_PREFIX = "ipfs://"
