"""Test fixtures for svcgen tests.

This module provides sample OpenAPI documents used across the test suite.
"""

# Minimal OpenAPI 3.0 document for basic testing
MINIMAL_OPENAPI_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Minimal API', 'version': '1.0.0'},
    'paths': {},
}

# Simple API with one endpoint
SIMPLE_API_SPEC = {
    'openapi': '3.0.0',
    'info': {
        'title': 'Simple API',
        'version': '1.0.0',
        'description': 'A simple API for testing',
    },
    'paths': {
        '/health': {
            'get': {
                'operationId': 'getHealth',
                'summary': 'Health check endpoint',
                'tags': ['health'],
                'responses': {
                    '200': {
                        'description': 'Successful response',
                        'content': {
                            'application/json': {
                                'schema': {
                                    'type': 'object',
                                    'properties': {'status': {'type': 'string'}},
                                }
                            }
                        },
                    }
                },
            }
        }
    },
}

# Petstore-like API with models and multiple endpoints
PETSTORE_SPEC = {
    'openapi': '3.0.0',
    'info': {
        'title': 'Petstore API',
        'version': '1.0.0',
        'description': 'A sample Petstore API for testing',
    },
    'paths': {
        '/pets': {
            'get': {
                'operationId': 'listPets',
                'summary': 'List all pets',
                'tags': ['pet'],
                'parameters': [
                    {
                        'name': 'limit',
                        'in': 'query',
                        'description': 'Maximum number of pets to return',
                        'required': False,
                        'schema': {'type': 'integer', 'format': 'int32'},
                    },
                    {
                        'name': 'status',
                        'in': 'query',
                        'description': 'Filter by status',
                        'required': False,
                        'schema': {
                            'type': 'string',
                            'enum': ['available', 'pending', 'sold'],
                        },
                    },
                ],
                'responses': {
                    '200': {
                        'description': 'A list of pets',
                        'content': {
                            'application/json': {
                                'schema': {
                                    'type': 'array',
                                    'items': {'$ref': '#/components/schemas/Pet'},
                                }
                            }
                        },
                    }
                },
            },
            'post': {
                'operationId': 'createPet',
                'summary': 'Create a pet',
                'tags': ['pet'],
                'requestBody': {
                    'required': True,
                    'content': {
                        'application/json': {
                            'schema': {'$ref': '#/components/schemas/NewPet'}
                        }
                    },
                },
                'responses': {
                    '201': {
                        'description': 'Pet created',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Pet'}
                            }
                        },
                    }
                },
            },
        },
        '/pets/{petId}': {
            'get': {
                'operationId': 'showPetById',
                'summary': 'Info for a specific pet',
                'tags': ['pet'],
                'parameters': [
                    {
                        'name': 'petId',
                        'in': 'path',
                        'required': True,
                        'description': 'The id of the pet to retrieve',
                        'schema': {'type': 'string'},
                    }
                ],
                'responses': {
                    '200': {
                        'description': 'Expected response to a valid request',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Pet'}
                            }
                        },
                    }
                },
            },
            'delete': {
                'operationId': 'deletePet',
                'summary': 'Delete a pet',
                'tags': ['pet'],
                'parameters': [
                    {
                        'name': 'petId',
                        'in': 'path',
                        'required': True,
                        'schema': {'type': 'string'},
                    }
                ],
                'responses': {'204': {'description': 'Pet deleted'}},
            },
        },
    },
    'components': {
        'schemas': {
            'Pet': {
                'type': 'object',
                'required': ['id', 'name'],
                'properties': {
                    'id': {'type': 'integer', 'format': 'int64'},
                    'name': {'type': 'string', 'description': 'The pet name'},
                    'tag': {'type': 'string'},
                    'status': {'$ref': '#/components/schemas/Status'},
                },
            },
            'NewPet': {
                'allOf': [
                    {'$ref': '#/components/schemas/Pet'},
                    {'type': 'object', 'properties': {'extra': {'type': 'string'}}},
                ]
            },
            'Status': {
                'type': 'string',
                'enum': ['available', 'pending', 'sold'],
            },
            'Pets': {
                'type': 'array',
                'items': {'$ref': '#/components/schemas/Pet'},
            },
        }
    },
}

# Undeclared path placeholders
PATH_PARAMS_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Path API', 'version': '1.0.0'},
    'paths': {
        '/a/{id}/b/{name}': {
            'get': {
                'operationId': 'getThing',
                'tags': ['thing'],
                'responses': {},
            }
        }
    },
}

# Two operations of one tag sharing an operationId
COLLISION_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Collision API', 'version': '1.0.0'},
    'paths': {
        '/users/{id}': {
            'get': {'operationId': 'getUser', 'tags': ['user'], 'responses': {}}
        },
        '/users/by-name/{name}': {
            'get': {'operationId': 'getUser', 'tags': ['user'], 'responses': {}}
        },
        '/users/by-email/{email}': {
            'get': {'operationId': 'getUser', 'tags': ['user'], 'responses': {}}
        },
    },
}

# Nested resource paths used for whitelisting
VERSIONED_USERS_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Users API', 'version': '2.0.0'},
    'paths': {
        '/api/v2/users/{id}': {
            'get': {'operationId': 'getUserById', 'tags': ['user'], 'responses': {}}
        },
        '/api/v2/users/{id}/orders': {
            'get': {
                'operationId': 'listUserOrders',
                'tags': ['user'],
                'responses': {},
            }
        },
    },
}

# Multipart uploads, directly and through references
UPLOAD_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Upload API', 'version': '1.0.0'},
    'paths': {
        '/files': {
            'post': {
                'operationId': 'uploadFiles',
                'tags': ['file'],
                'requestBody': {
                    'content': {
                        'multipart/form-data': {
                            'schema': {
                                'type': 'object',
                                'required': ['name'],
                                'properties': {
                                    'name': {'type': 'string'},
                                    'file': {'type': 'string', 'format': 'binary'},
                                    'attachments': {
                                        'type': 'array',
                                        'items': {'type': 'string', 'format': 'binary'},
                                    },
                                },
                            }
                        }
                    }
                },
                'responses': {},
            }
        },
        '/avatars': {
            'post': {
                'operationId': 'uploadAvatar',
                'tags': ['file'],
                'requestBody': {
                    'content': {
                        'multipart/form-data': {
                            'schema': {'$ref': '#/components/schemas/AvatarUpload'}
                        }
                    }
                },
                'responses': {},
            }
        },
    },
    'components': {
        'schemas': {
            'Upload': {
                'type': 'object',
                'properties': {'avatar': {'type': 'string', 'format': 'base64'}},
            },
            'AvatarUpload': {
                'allOf': [
                    {'$ref': '#/components/schemas/Upload'},
                    {
                        'type': 'object',
                        'properties': {'doc': {'type': 'string', 'format': 'binary'}},
                    },
                ]
            },
        }
    },
}

# Response envelopes unwrapped through data_fields
ENVELOPE_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Envelope API', 'version': '1.0.0'},
    'paths': {
        '/users/current': {
            'get': {
                'operationId': 'currentUser',
                'tags': ['user'],
                'responses': {
                    '200': {
                        'description': 'OK',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/UserResult'}
                            }
                        },
                    }
                },
            }
        }
    },
    'components': {
        'schemas': {
            'User': {
                'type': 'object',
                'properties': {'name': {'type': 'string'}},
            },
            'UserResult': {
                'type': 'object',
                'properties': {
                    'success': {'type': 'boolean'},
                    'data': {'$ref': '#/components/schemas/User'},
                },
            },
        }
    },
}

# Gateway-mapped operation
GATEWAY_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Gateway API', 'version': '1.0.0'},
    'paths': {
        '/pet/query': {
            'post': {
                'operationId': 'queryPet',
                'tags': ['pet'],
                'x-antTech-description': {
                    'apiName': 'pet.query',
                    'productCode': 'PETSTORE',
                    'antTechVersion': '1.0',
                    'antTechApiName': '/gateway/pet/query',
                },
                'responses': {},
            }
        }
    },
}

# A reference that leads nowhere
BROKEN_REF_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Broken API', 'version': '1.0.0'},
    'paths': {
        '/orders': {
            'post': {
                'operationId': 'createOrder',
                'tags': ['order'],
                'requestBody': {'$ref': '#/components/requestBodies/Missing'},
                'responses': {},
            }
        }
    },
    'components': {'schemas': {}, 'requestBodies': {}},
}

# A reference chain that loops back on itself
CYCLIC_REF_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Cyclic API', 'version': '1.0.0'},
    'paths': {
        '/orders': {
            'post': {
                'operationId': 'createOrder',
                'tags': ['order'],
                'requestBody': {'$ref': '#/components/requestBodies/A'},
                'responses': {},
            }
        }
    },
    'components': {
        'requestBodies': {
            'A': {'$ref': '#/components/requestBodies/B'},
            'B': {'$ref': '#/components/requestBodies/A'},
        }
    },
}

# Swagger 2 style parameters and untagged operations
SWAGGER_PARAMS_SPEC = {
    'swagger': '2.0',
    'info': {'title': 'Legacy API', 'version': '1.0.0'},
    'paths': {
        '/api/v1/orders/{orderId}': {
            'parameters': [
                {'name': 'X-Tenant', 'in': 'header', 'type': 'string', 'required': True}
            ],
            'get': {
                'parameters': [
                    {'name': 'orderId', 'in': 'path', 'type': 'integer', 'required': True},
                    {'name': 'expand', 'in': 'query', 'type': 'boolean'},
                ],
                'responses': {},
            },
        },
        '/api/v1/customers': {
            'get': {
                'x-swagger-router-controller': 'CustomerController',
                'responses': {},
            },
            'post': {'operationId': 'registerCustomer', 'responses': {}},
        },
    },
}
