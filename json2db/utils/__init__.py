from json2db.utils.deep_merge import deep_merge
from json2db.utils.filter import matches
from json2db.utils.ids import document_id_from_path, new_document_id


__all__ = ["deep_merge", "matches", "new_document_id", "document_id_from_path"]
