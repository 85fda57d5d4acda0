"""
Интеграционные тесты для генератора
"""

import os
import tempfile

from openapi_ts_client.generator import ApiClientGenerator


USER_REF = {"$ref": "#/components/schemas/User"}
USER_ID = {"name": "user_id", "in": "path", "required": True, "schema": {"type": "integer"}}

COMPLEX_SPEC = {
    "openapi": "3.0.0",
    "info": {"title": "Complex API", "version": "2.0.0"},
    "components": {
        "schemas": {
            "User": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer", "format": "int64"},
                    "username": {"type": "string"},
                    "email": {"type": "string", "format": "email"},
                    "created_at": {"type": "string", "format": "date-time"},
                    "is_active": {"type": "boolean"},
                    "role": {"$ref": "#/components/schemas/UserRole"},
                },
                "required": ["id", "username", "email"],
            },
            "CreateUserRequest": {
                "type": "object",
                "properties": {
                    "username": {"type": "string"},
                    "email": {"type": "string"},
                    "password": {"type": "string", "format": "password"},
                },
                "required": ["username", "email", "password"],
            },
            "UserRole": {
                "type": "string",
                "enum": ["admin", "user", "moderator"],
            },
            "LoginResponse": {
                "type": "object",
                "properties": {
                    "access_token": {"type": "string"},
                    "token_type": {"type": "string"},
                    "user": USER_REF,
                },
            },
        }
    },
    "paths": {
        "/auth/login": {
            "post": {
                "operationId": "login",
                "summary": "User login",
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "username": {"type": "string"},
                                    "password": {"type": "string"},
                                },
                            }
                        }
                    }
                },
                "responses": {
                    "200": {
                        "description": "Successful login",
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/LoginResponse"}}
                        },
                    },
                    "401": {"description": "Invalid credentials"},
                },
            }
        },
        "/users": {
            "get": {
                "operationId": "listUsers",
                "summary": "Get all users",
                "parameters": [
                    {"name": "limit", "in": "query", "schema": {"type": "integer"}},
                    {"name": "offset", "in": "query", "schema": {"type": "integer"}},
                    {"name": "search", "in": "query", "schema": {"type": "string"}},
                ],
                "responses": {
                    "200": {
                        "description": "Users list",
                        "content": {"application/json": {"schema": {"type": "array", "items": USER_REF}}},
                    }
                },
            },
            "post": {
                "operationId": "createUser",
                "summary": "Create user",
                "requestBody": {
                    "content": {
                        "application/json": {"schema": {"$ref": "#/components/schemas/CreateUserRequest"}}
                    }
                },
                "responses": {
                    "201": {
                        "description": "User created",
                        "content": {"application/json": {"schema": USER_REF}},
                    }
                },
            },
        },
        "/users/{user_id}": {
            "parameters": [USER_ID],
            "get": {
                "operationId": "getUser",
                "summary": "Get user by ID",
                "responses": {
                    "200": {"description": "User details", "content": {"application/json": {"schema": USER_REF}}},
                    "404": {"description": "User not found"},
                },
            },
            "put": {
                "operationId": "updateUser",
                "summary": "Update user",
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "username": {"type": "string"},
                                    "email": {"type": "string"},
                                },
                            }
                        }
                    }
                },
                "responses": {
                    "200": {"description": "User updated", "content": {"application/json": {"schema": USER_REF}}}
                },
            },
            "delete": {
                "operationId": "deleteUser",
                "summary": "Delete user",
                "responses": {"204": {"description": "User deleted"}},
            },
        },
        "/users/{user_id}/avatar": {
            "post": {
                "operationId": "uploadAvatar",
                "summary": "Upload user avatar",
                "parameters": [USER_ID],
                "requestBody": {
                    "content": {
                        "multipart/form-data": {
                            "schema": {
                                "type": "object",
                                "properties": {"avatar": {"type": "string", "format": "binary"}},
                            }
                        }
                    }
                },
                "responses": {"200": {"description": "Avatar uploaded"}},
            }
        },
    },
}


class TestIntegration:
    """Интеграционные тесты"""

    def test_complete_generation_workflow(self):
        """Тест полного процесса генерации"""
        code = ApiClientGenerator(COMPLEX_SPEC).generate_code()

        # Все операции в карте в порядке документа
        order = ["login", "listUsers", "createUser", "getUser", "updateUser", "deleteUser", "uploadAvatar"]
        positions = [code.index(f"  ...{name}(),") for name in order]
        assert positions == sorted(positions)

        for name in order:
            assert f"function {name}() {{" in code

        # Параметр уровня пути попадает в каждую операцию
        assert code.count("(userId: number, __options?: __Config) => ({") == 4
        assert code.count("interpolatePath(__url, { user_id: userId })") == 4

        # Query параметры необязательны
        assert "{ params?: __BaseTypes__['Params'] }" in code

        # Multipart
        assert "data: toFormData(__options?.data)" in code
        assert "avatar?: File;" in code

        # Тело с обязательными полями
        assert "(__options: __Config) => ({" in code

        # Типы из схем
        assert "email: string;" in code
        assert "role?: \"admin\" | \"user\" | \"moderator\";" in code
        assert "@format int64" in code

        # Ответ 201 не моделируется
        create_user = code[code.index("function createUser()"):code.index("function listUsers()")]
        assert "Response: any;" in create_user

        assert '<K extends "DELETE /users/{user_id}">(key: K)' in code

    def test_file_generation_and_save(self):
        """Тест генерации и сохранения файлов"""
        simple_spec = {
            "openapi": "3.0.0",
            "info": {"title": "Save Test", "version": "1.0.0"},
            "paths": {
                "/ping": {
                    "get": {
                        "operationId": "ping",
                        "responses": {"200": {"description": "Pong"}},
                    }
                }
            },
        }

        project = ApiClientGenerator(simple_spec, source_url="http://localhost:8000").generate()

        with tempfile.TemporaryDirectory() as temp_dir:
            # Сохраняем файлы
            for file_model in project.files:
                file_path = os.path.join(temp_dir, file_model.file_name)
                os.makedirs(os.path.dirname(file_path), exist_ok=True)

                with open(file_path, "w") as f:
                    f.write(str(file_model))

            assert os.path.exists(os.path.join(temp_dir, "api.ts"))
            assert os.path.exists(os.path.join(temp_dir, "openapi.toml"))

            with open(os.path.join(temp_dir, "api.ts"), "r") as f:
                content = f.read()
                assert "function ping() {" in content
                assert "export function createAxiosAPI" in content
