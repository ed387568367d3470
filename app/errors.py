class ComercialError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ComercialError):
    status_code = 400


class NotFoundError(ComercialError):
    status_code = 404

    def __init__(self, table, id):
        super().__init__(f"{table} #{id} não encontrado")
        self.table = table
        self.id = id
