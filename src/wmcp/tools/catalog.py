"""The built-in Weaviate tool catalog.

Each entry maps one Weaviate REST endpoint onto a tool.  Parameter schemas are
what clients see in ``tools/list`` and what arguments are validated against.
"""

from __future__ import annotations

from typing import Any

from wmcp.tools.models import WeaviateEndpoint

QUORUM = "QUORUM"

_TENANT_DOC = "Specifies the tenant in a request targeting a multi-tenant collection."
_BACKEND_DOC = "The backup backend name (e.g., `filesystem`, `gcs`, `s3`, `azure`)."


def _schema(properties: dict[str, Any] | None = None, required: list[str] | None = None) -> dict[str, Any]:
    return {"type": "object", "properties": properties or {}, "required": required or []}


def _string(description: str) -> dict[str, Any]:
    return {"type": "string", "description": description}


def _object(description: str) -> dict[str, Any]:
    return {"type": "object", "description": description}


def _string_list(description: str) -> dict[str, Any]:
    return {"type": "array", "items": {"type": "string"}, "description": description}


# ---------------------------------------------------------------------------
# Instance and cluster
# ---------------------------------------------------------------------------

_INSTANCE = [
    WeaviateEndpoint(
        name="check_liveness",
        description="Check if the Weaviate application is alive.",
        path="/.well-known/live",
        response="text",
    ),
    WeaviateEndpoint(
        name="check_weaviate_readiness",
        description="Check if the Weaviate application is ready to receive traffic.",
        path="/.well-known/ready",
        response="text",
    ),
    WeaviateEndpoint(
        name="get_instance_metadata",
        description="Get instance metadata from Weaviate.",
        path="/meta",
    ),
    WeaviateEndpoint(
        name="list_available_endpoints",
        description="List available endpoints in Weaviate.",
        path="/",
    ),
    WeaviateEndpoint(
        name="get_oidc_discovery_info",
        description="Retrieve OIDC discovery information from Weaviate.",
        path="/.well-known/openid-configuration",
    ),
    WeaviateEndpoint(
        name="get_raft_cluster_statistics",
        description="Retrieve Raft cluster statistics from Weaviate.",
        path="/cluster/statistics",
    ),
]

# ---------------------------------------------------------------------------
# Schema and collections
# ---------------------------------------------------------------------------

_COLLECTION_PROPERTIES: dict[str, Any] = {
    "class": _string("The name of the class to be created."),
    "vectorConfig": {
        "type": "object",
        "description": "Configuration for the vector.",
        "properties": {
            "vector_name": {
                "type": "object",
                "properties": {
                    "vectorizer": _string("The vectorizer to use."),
                    "vectorIndexType": _string("The type of vector index."),
                    "vectorIndexConfig": _object("Additional vector index configuration."),
                },
            },
        },
    },
    "shardingConfig": {
        "type": "object",
        "description": "Configuration for sharding.",
        "properties": {
            "desiredCount": {"type": "integer", "description": "Desired count for sharding."},
            "virtualPerPhysical": {"type": "integer", "description": "Virtual per physical count."},
        },
    },
    "replicationConfig": {
        "type": "object",
        "description": "Configuration for replication.",
        "properties": {
            "factor": {"type": "integer", "description": "Replication factor."},
        },
    },
    "invertedIndexConfig": {
        "type": "object",
        "description": "Configuration for inverted index.",
        "properties": {
            "cleanupIntervalSeconds": {"type": "integer", "description": "Cleanup interval in seconds."},
            "bm25": {
                "type": "object",
                "properties": {
                    "k1": {"type": "number", "description": "BM25 k1 parameter."},
                    "b": {"type": "number", "description": "BM25 b parameter."},
                },
            },
            "stopwords": {
                "type": "object",
                "properties": {"preset": _string("Preset for stopwords.")},
            },
        },
    },
    "description": _string("Description of the class."),
    "properties": {
        "type": "array",
        "items": {
            "type": "object",
            "properties": {
                "name": _string("Name of the property."),
                "dataType": _string_list("Data types of the property."),
                "description": _string("Description of the property."),
            },
        },
    },
}

_SCHEMA = [
    WeaviateEndpoint(
        name="get_schema",
        description="Fetch the entire schema from Weaviate.",
        path="/schema",
    ),
    WeaviateEndpoint(
        name="create_collection",
        description="Create a new data object collection in Weaviate.",
        method="POST",
        path="/schema",
        parameters=_schema(
            _COLLECTION_PROPERTIES,
            [
                "class",
                "vectorConfig",
                "shardingConfig",
                "replicationConfig",
                "invertedIndexConfig",
                "description",
                "properties",
            ],
        ),
        body_fields={key: key for key in _COLLECTION_PROPERTIES},
    ),
    WeaviateEndpoint(
        name="get_class_schema",
        description="Get the schema of a specific class in Weaviate.",
        path="/schema/{className}",
        parameters=_schema(
            {"className": _string("The name of the class whose schema is to be retrieved.")},
            ["className"],
        ),
    ),
    WeaviateEndpoint(
        name="update_collection",
        description="Update an existing collection in Weaviate.",
        method="PUT",
        path="/schema/{className}",
        parameters=_schema(
            {
                "className": _string("The name of the class to update."),
                "config": _object("The new configuration for the class."),
            },
            ["className", "config"],
        ),
        body_argument="config",
    ),
    WeaviateEndpoint(
        name="remove_collection",
        description="Remove a collection from the Weaviate schema.",
        method="DELETE",
        path="/schema/{className}",
        parameters=_schema(
            {"className": _string("The name of the class to be removed from the schema.")},
            ["className"],
        ),
        response="deleted",
    ),
    WeaviateEndpoint(
        name="add_property",
        description="Add a property to an existing collection in Weaviate.",
        method="POST",
        path="/schema/{className}/properties",
        parameters=_schema(
            {
                "className": _string("The name of the class to which the property will be added."),
                "propertyData": {
                    "type": "object",
                    "properties": {
                        "name": _string("The name of the property."),
                        "dataType": _string_list("The data types for the property."),
                        "description": _string("A description of the property."),
                        "moduleConfig": _object("Configuration for the module."),
                        "indexInverted": {
                            "type": "boolean",
                            "description": "Whether the property should be indexed inverted.",
                        },
                        "indexFilterable": {
                            "type": "boolean",
                            "description": "Whether the property should be filterable.",
                        },
                        "indexSearchable": {
                            "type": "boolean",
                            "description": "Whether the property should be searchable.",
                        },
                        "tokenization": _string("The tokenization method for the property."),
                        "nestedProperties": {
                            "type": "array",
                            "items": {"type": "object"},
                            "description": "Nested properties for the property.",
                        },
                    },
                    "required": ["name", "dataType", "description"],
                },
            },
            ["className", "propertyData"],
        ),
        body_argument="propertyData",
    ),
]

# ---------------------------------------------------------------------------
# Tenants, shards and nodes
# ---------------------------------------------------------------------------


def _tenant_list(description: str, *, status_enum: bool = False) -> dict[str, Any]:
    status: dict[str, Any] = _string("The activity status of the tenant.")
    required = ["name"]
    if status_enum:
        status = {"type": "string", "enum": ["COLD", "ACTIVE", "INACTIVE"], **status}
        required.append("activityStatus")
    return {
        "type": "array",
        "items": {
            "type": "object",
            "properties": {"name": _string("The name of the tenant."), "activityStatus": status},
            "required": required,
        },
        "description": description,
    }


_TENANTS = [
    WeaviateEndpoint(
        name="get_tenants",
        description="Get the list of tenants from a specified class in Weaviate.",
        path="/schema/{className}/tenants",
        parameters=_schema(
            {"className": _string("The name of the class to get tenants from.")},
            ["className"],
        ),
    ),
    WeaviateEndpoint(
        name="create_tenant",
        description="Create a new tenant in Weaviate.",
        method="POST",
        path="/schema/{className}/tenants",
        parameters=_schema(
            {
                "className": _string("The name of the class for which the tenant is being created."),
                "tenants": _tenant_list("An array of tenant objects to be created."),
            },
            ["className", "tenants"],
        ),
        body_argument="tenants",
    ),
    WeaviateEndpoint(
        name="update_tenant",
        description="Update a tenant in Weaviate.",
        method="PUT",
        path="/schema/{className}/tenants",
        parameters=_schema(
            {
                "className": _string("The name of the class for which the tenant is being updated."),
                "tenants": _tenant_list("An array of tenant objects to update.", status_enum=True),
            },
            ["className", "tenants"],
        ),
        body_argument="tenants",
    ),
    WeaviateEndpoint(
        name="delete_tenants",
        description="Delete tenants from a specified class in Weaviate.",
        method="DELETE",
        path="/schema/{className}/tenants",
        parameters=_schema(
            {
                "className": _string("The name of the class from which to delete tenants."),
                "tenantIds": _string_list("An array of tenant IDs to delete."),
            },
            ["className", "tenantIds"],
        ),
        body_argument="tenantIds",
        response="deleted",
    ),
    WeaviateEndpoint(
        name="check_tenant_exists",
        description="Check if a tenant exists for a specific class in Weaviate.",
        method="HEAD",
        path="/schema/{className}/tenants/{tenantName}",
        parameters=_schema(
            {
                "className": _string("The name of the class to check."),
                "tenantName": _string("The name of the tenant to check."),
            },
            ["className", "tenantName"],
        ),
        headers={"consistency": "true"},
        response="exists",
    ),
    WeaviateEndpoint(
        name="get_shard_status",
        description="Get the status of every shard in the cluster.",
        path="/schema/{className}/shards",
        parameters=_schema(
            {
                "className": _string("The name of the class to get the shard status for."),
                "tenant": _string("The tenant identifier."),
            },
            ["className", "tenant"],
        ),
        query={"tenant": "tenant"},
    ),
    WeaviateEndpoint(
        name="update_shard_status",
        description="Update the status of a shard in Weaviate.",
        method="PUT",
        path="/schema/{className}/shards/{shardName}",
        parameters=_schema(
            {
                "className": _string("The name of the class associated with the shard."),
                "shardName": _string("The name of the shard to update."),
                "status": _string('The new status for the shard (e.g., "READY", "READONLY").'),
            },
            ["className", "shardName", "status"],
        ),
        body_fields={"status": "status"},
    ),
    WeaviateEndpoint(
        name="get_node_info",
        description="Retrieve node information for a specific class in Weaviate.",
        path="/nodes/{className}",
        parameters=_schema(
            {"className": _string("The name of the class for which to retrieve node information.")},
            ["className"],
        ),
        fixed_query={"output": "minimal"},
    ),
]

# ---------------------------------------------------------------------------
# Objects
# ---------------------------------------------------------------------------

_OBJECTS = [
    WeaviateEndpoint(
        name="get_object",
        description="Get a data object based on its class name and UUID.",
        path="/objects/{className}/{id}",
        parameters=_schema(
            {
                "className": _string("The class name of the object to retrieve."),
                "id": _string("The UUID of the object to retrieve."),
                "include": _string("Include additional information, such as classification infos."),
                "node_name": _string("The target node which should fulfill the request."),
                "tenant": _string(_TENANT_DOC),
            },
            ["className", "id"],
        ),
        query={"include": "include", "node_name": "node_name", "tenant": "tenant"},
        fixed_query={"consistency_level": QUORUM},
    ),
    WeaviateEndpoint(
        name="check_object_exists",
        description="Check if an object exists in Weaviate.",
        method="HEAD",
        path="/objects/{className}/{id}",
        parameters=_schema(
            {
                "className": _string("The class name as defined in the schema."),
                "id": _string("The UUID of the data object."),
                "tenant": _string(_TENANT_DOC),
            },
            ["className", "id"],
        ),
        query={"tenant": "tenant"},
        fixed_query={"consistency_level": QUORUM},
        response="exists",
    ),
    WeaviateEndpoint(
        name="update_object",
        description="Update an object in Weaviate.",
        method="PUT",
        path="/objects/{className}/{id}",
        parameters=_schema(
            {
                "className": _string("The class name of the object to update."),
                "id": _string("The UUID of the object to update."),
                "objectData": _object("The data to update the object with."),
            },
            ["className", "id", "objectData"],
        ),
        fixed_query={"consistency_level": QUORUM},
        body_argument="objectData",
    ),
    WeaviateEndpoint(
        name="patch_object",
        description="Update an object in Weaviate using patch semantics.",
        method="PATCH",
        path="/objects/{className}/{id}",
        parameters=_schema(
            {
                "className": _string("The class name as defined in the schema."),
                "id": _string("The UUID of the data object to update."),
                "data": _object("The data to update the object with, following the patch semantics."),
            },
            ["className", "id", "data"],
        ),
        fixed_query={"consistency_level": QUORUM},
        body_argument="data",
    ),
    WeaviateEndpoint(
        name="delete_object",
        description="Delete an object from Weaviate.",
        method="DELETE",
        path="/objects/{className}/{id}",
        parameters=_schema(
            {
                "className": _string("The class name of the object to delete."),
                "id": _string("The unique ID of the object to delete."),
                "tenant": _string(_TENANT_DOC),
            },
            ["className", "id"],
        ),
        query={"tenant": "tenant"},
        fixed_query={"consistency_level": QUORUM},
        response="deleted",
    ),
    WeaviateEndpoint(
        name="validate_object",
        description="Validate an object's schema and meta-data without creating it.",
        method="POST",
        path="/objects/validate",
        parameters=_schema(
            {
                "class": _string("The class of the object."),
                "vectorWeights": _object("The weights for the vectors."),
                "properties": _object("The properties of the object."),
                "id": _string("The unique identifier for the object."),
                "creationTimeUnix": {"type": "integer", "description": "The creation time in Unix timestamp."},
                "lastUpdateTimeUnix": {"type": "integer", "description": "The last update time in Unix timestamp."},
                "vector": {
                    "type": "array",
                    "items": {"type": "number"},
                    "description": "The vector representation of the object.",
                },
                "vectors": _object("Additional vectors for the object."),
                "tenant": _string("The tenant for the object."),
                "additional": _object("Additional metadata for the object."),
            },
            ["class", "id", "creationTimeUnix", "lastUpdateTimeUnix", "vector"],
        ),
        body_fields={
            key: key
            for key in (
                "class",
                "vectorWeights",
                "properties",
                "id",
                "creationTimeUnix",
                "lastUpdateTimeUnix",
                "vector",
                "vectors",
                "tenant",
                "additional",
            )
        },
    ),
]

# ---------------------------------------------------------------------------
# Batch operations
# ---------------------------------------------------------------------------

_BATCH = [
    WeaviateEndpoint(
        name="batch_create_objects",
        description="Batch create new objects in Weaviate.",
        method="POST",
        path="/batch/objects",
        parameters=_schema(
            {
                "objects": {"type": "array", "description": "An array of objects to be created."},
                "fields": _string_list("The fields to include in the request."),
                "consistency_level": _string("The consistency level for the request."),
            },
            ["objects"],
        ),
        query={"consistency_level": "consistency_level"},
        defaults={"fields": ["ALL"], "consistency_level": QUORUM},
        body_fields={"fields": "fields", "objects": "objects"},
    ),
    WeaviateEndpoint(
        name="batch_delete_objects",
        description="Batch delete objects in Weaviate based on a specified filter.",
        method="DELETE",
        path="/batch/objects",
        parameters=_schema(
            {
                "class": _string("The class of objects to delete."),
                "where": _object("The filter criteria for selecting objects to delete."),
                "consistency_level": _string(
                    "Determines how many replicas must acknowledge a request before it is considered successful."
                ),
                "tenant": _string(_TENANT_DOC),
            },
            ["class", "where", "tenant"],
        ),
        query={"consistency_level": "consistency_level", "tenant": "tenant"},
        defaults={"consistency_level": QUORUM},
        body_fields={"match.class": "class", "match.where": "where"},
        body_template={"output": "minimal", "dryRun": False},
    ),
    WeaviateEndpoint(
        name="batch_create_cross_references",
        description="Batch create cross-references between collections items in Weaviate.",
        method="POST",
        path="/batch/references",
        parameters=_schema(
            {
                "references": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "from": _string("The URI of the source object."),
                            "to": _string("The URI of the target object."),
                            "tenant": _string("The tenant identifier."),
                        },
                        "required": ["from", "to", "tenant"],
                    },
                    "description": "An array of reference objects to create.",
                },
            },
            ["references"],
        ),
        fixed_query={"consistency_level": QUORUM},
        body_argument="references",
    ),
    WeaviateEndpoint(
        name="perform_batched_graphql_queries",
        description="Perform batched GraphQL queries on Weaviate.",
        method="POST",
        path="/graphql/batch",
        parameters=_schema(
            {
                "queries": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "operationName": _string("The name of the operation."),
                            "query": _string("The GraphQL query string."),
                            "variables": _object("The variables for the GraphQL query."),
                        },
                        "required": ["operationName", "query"],
                    },
                    "description": "An array of query objects to be executed.",
                },
            },
            ["queries"],
        ),
        body_argument="queries",
    ),
]

# ---------------------------------------------------------------------------
# Cross references
# ---------------------------------------------------------------------------

_REFERENCE_PROPERTIES: dict[str, Any] = {
    "className": _string("The class name as defined in the schema."),
    "id": _string("Unique ID of the Object."),
    "propertyName": _string("Unique name of the property related to the Object."),
}

_REFERENCES = [
    WeaviateEndpoint(
        name="add_cross_reference",
        description="Add a cross-reference to an object in Weaviate.",
        method="POST",
        path="/objects/{className}/{id}/references/{propertyName}",
        parameters=_schema(
            {
                **_REFERENCE_PROPERTIES,
                "referenceData": _object("The reference data to be added."),
                "tenant": _string(_TENANT_DOC),
            },
            ["className", "id", "propertyName", "referenceData", "tenant"],
        ),
        query={"tenant": "tenant"},
        fixed_query={"consistency_level": QUORUM},
        body_argument="referenceData",
    ),
    WeaviateEndpoint(
        name="replace_cross_references",
        description="Replace all references in cross-reference property of an object.",
        method="PUT",
        path="/objects/{className}/{id}/references/{propertyName}",
        parameters=_schema(
            {
                **_REFERENCE_PROPERTIES,
                "references": {"type": "array", "description": "Array of references to replace."},
                "tenant": _string(_TENANT_DOC),
            },
            ["className", "id", "propertyName", "references"],
        ),
        query={"tenant": "tenant"},
        fixed_query={"consistency_level": QUORUM},
        body_argument="references",
    ),
    WeaviateEndpoint(
        name="delete_cross_reference",
        description="Delete a cross-reference from a Weaviate object.",
        method="DELETE",
        path="/objects/{className}/{id}/references/{propertyName}",
        parameters=_schema(
            {**_REFERENCE_PROPERTIES, "tenant": _string(_TENANT_DOC)},
            ["className", "id", "propertyName", "tenant"],
        ),
        query={"tenant": "tenant"},
        fixed_query={"consistency_level": QUORUM},
        response="deleted",
    ),
]

# ---------------------------------------------------------------------------
# Backups, restores and classifications
# ---------------------------------------------------------------------------

_BACKUPS = [
    WeaviateEndpoint(
        name="start_backup_process",
        description="Start a backup process in Weaviate.",
        method="POST",
        path="/backups/{backend}",
        parameters=_schema(
            {
                "backend": _string(_BACKEND_DOC),
                "id": _string("The unique identifier for the backup."),
                "config": {
                    "type": "object",
                    "properties": {
                        "CPUPercentage": {
                            "type": "integer",
                            "description": "The percentage of CPU to allocate for the backup process.",
                        },
                        "ChunkSize": {"type": "integer", "description": "The size of chunks for the backup."},
                        "CompressionLevel": _string("The level of compression to use."),
                    },
                    "required": ["CPUPercentage", "ChunkSize", "CompressionLevel"],
                },
                "include": _string_list(
                    "An array of strings specifying which collections to include in the backup."
                ),
                "exclude": _string_list(
                    "An array of strings specifying which collections to exclude from the backup."
                ),
            },
            ["backend", "id", "config"],
        ),
        body_fields={"id": "id", "config": "config", "include": "include", "exclude": "exclude"},
    ),
    WeaviateEndpoint(
        name="get_backup_status",
        description="Get the status of a backup process in Weaviate.",
        path="/backups/{backend}/{id}",
        parameters=_schema(
            {
                "backend": _string("The backup backend name (e.g., filesystem, gcs, s3)."),
                "id": _string("The ID of the backup, must be URL-safe and lowercase."),
            },
            ["backend", "id"],
        ),
    ),
    WeaviateEndpoint(
        name="start_restoration_process",
        description="Starts a restoration process for a backup in Weaviate.",
        method="POST",
        path="/backups/{backend}/{id}/restore",
        parameters=_schema(
            {
                "backend": _string(_BACKEND_DOC),
                "id": _string("The ID of the backup to restore."),
                "CPUPercentage": {
                    "type": "integer",
                    "description": "The percentage of CPU to allocate for the restoration process.",
                },
                "include": _string_list(
                    "An array of strings specifying which collections to include in the restoration."
                ),
                "exclude": _string_list(
                    "An array of strings specifying which collections to exclude from the restoration."
                ),
                "node_mapping": _object("A mapping of node names for the restoration process."),
            },
            ["backend", "id"],
        ),
        defaults={"CPUPercentage": 50, "include": [], "exclude": [], "node_mapping": {}},
        body_fields={
            "config.CPUPercentage": "CPUPercentage",
            "include": "include",
            "exclude": "exclude",
            "node_mapping": "node_mapping",
        },
    ),
    WeaviateEndpoint(
        name="get_restore_process_status",
        description="Get the status of a backup restoration process in Weaviate.",
        path="/backups/{backend}/{id}/restore",
        parameters=_schema(
            {
                "backend": _string(_BACKEND_DOC),
                "id": _string("The ID of the backup. Must be URL-safe and work as a filesystem path."),
            },
            ["backend", "id"],
        ),
    ),
    WeaviateEndpoint(
        name="view_classification",
        description="Retrieve a previously created classification from Weaviate.",
        path="/classifications/{id}",
        parameters=_schema(
            {"id": _string("The ID of the classification to retrieve.")},
            ["id"],
        ),
    ),
]

CATALOG: tuple[WeaviateEndpoint, ...] = (
    *_INSTANCE,
    *_SCHEMA,
    *_TENANTS,
    *_OBJECTS,
    *_BATCH,
    *_REFERENCES,
    *_BACKUPS,
)
"""Every built-in Weaviate tool, in ``tools/list`` order."""
